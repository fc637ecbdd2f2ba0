from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Callable, Optional, Sequence

from .models import ROLE_BACKEND, ROLE_FRONTEND, ROLES, AuthorEntry, Identity

DEFAULT_BACKEND_LABEL = "server"
DEFAULT_FRONTEND_LABEL = "client"

# Picks one entry out of a non-empty candidate list.
Picker = Callable[[Sequence[AuthorEntry]], AuthorEntry]


def default_picker(seed: int | None = None) -> Picker:
    if seed is None:
        return random.choice
    return random.Random(seed).choice


def parse_author_pool(items: object) -> tuple[AuthorEntry, ...]:
    if not isinstance(items, list) or not items:
        raise ValueError("author pool must be a non-empty list of {name, email, role} objects")
    pool: list[AuthorEntry] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"author #{i}: expected an object, got {type(item).__name__}")
        name = str(item.get("name", "") or "").strip()
        email = str(item.get("email", "") or "").strip()
        role = str(item.get("role", "") or "").strip().lower()
        if not name or not email:
            raise ValueError(f"author #{i}: name and email are required")
        if role not in ROLES:
            raise ValueError(f"author #{i} ({name}): invalid role {role!r} (expected one of: {', '.join(ROLES)})")
        pool.append(AuthorEntry(identity=Identity(name=name, email=email), role=role))
    return tuple(pool)


def load_author_pool(path: Path) -> tuple[AuthorEntry, ...]:
    if not path.exists():
        raise ValueError(f"author pool file not found: {path}")
    try:
        items = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"author pool file is not valid JSON: {path}: {e}") from e
    return parse_author_pool(items)


def infer_role(
    paths: Sequence[str],
    *,
    backend_label: str = DEFAULT_BACKEND_LABEL,
    frontend_label: str = DEFAULT_FRONTEND_LABEL,
) -> Optional[str]:
    """
    Majority vote over changed paths. A path counts for a side when the label
    appears anywhere in it (plain substring). Ties, including 0/0, yield None.
    """
    backend = sum(1 for p in paths if backend_label in p)
    frontend = sum(1 for p in paths if frontend_label in p)
    if backend > frontend:
        return ROLE_BACKEND
    if frontend > backend:
        return ROLE_FRONTEND
    return None


def pick_author(pool: Sequence[AuthorEntry], role: Optional[str], picker: Picker) -> AuthorEntry:
    if not pool:
        raise ValueError("author pool is empty")
    candidates = [a for a in pool if a.role == role] if role else list(pool)
    if not candidates:
        # nobody holds this role: any author will do
        candidates = list(pool)
    return picker(candidates)
