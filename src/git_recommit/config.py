from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from .authors import DEFAULT_BACKEND_LABEL, DEFAULT_FRONTEND_LABEL, load_author_pool, parse_author_pool
from .branch import DEFAULT_BRANCH_PREFIX
from .models import AuthorEntry
from .rewrite import DEFAULT_MESSAGE_MARKER, DEFAULT_MESSAGE_REPLACEMENT
from .signatures import DEFAULT_SHIFT_MONTHS

DEFAULT_AUTHORS_PATH = Path("config") / "authors.json"


@dataclasses.dataclass(frozen=True)
class RecommitConfig:
    authors: tuple[AuthorEntry, ...]
    backend_label: str = DEFAULT_BACKEND_LABEL
    frontend_label: str = DEFAULT_FRONTEND_LABEL
    message_marker: str = DEFAULT_MESSAGE_MARKER
    message_replacement: str = DEFAULT_MESSAGE_REPLACEMENT
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    time_shift_months: int = DEFAULT_SHIFT_MONTHS


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    return json.loads(config_path.read_text(encoding="utf-8"))


def _str_option(config: dict, key: str, default: str, *, allow_empty: bool = False) -> str:
    value = config.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"config {key!r} must be a string")
    if not value and not allow_empty:
        raise ValueError(f"config {key!r} must not be empty")
    return value


def build_config(config: dict, *, base_dir: Path, authors_path: Path | None = None) -> RecommitConfig:
    """
    Turn a raw config dict into a RecommitConfig. The author pool comes from
    `authors_path` when given, then inline `authors`, then `authors_path` in the
    config (relative to `base_dir`), then config/authors.json.
    """
    if authors_path is not None:
        pool = load_author_pool(authors_path)
    elif config.get("authors") is not None:
        pool = parse_author_pool(config.get("authors"))
    else:
        rel = Path(str(config.get("authors_path") or DEFAULT_AUTHORS_PATH))
        pool = load_author_pool(rel if rel.is_absolute() else base_dir / rel)

    months = config.get("time_shift_months", DEFAULT_SHIFT_MONTHS)
    if isinstance(months, bool) or not isinstance(months, int):
        raise ValueError("config 'time_shift_months' must be an integer")

    return RecommitConfig(
        authors=pool,
        backend_label=_str_option(config, "backend_label", DEFAULT_BACKEND_LABEL),
        frontend_label=_str_option(config, "frontend_label", DEFAULT_FRONTEND_LABEL),
        message_marker=_str_option(config, "message_marker", DEFAULT_MESSAGE_MARKER, allow_empty=True),
        message_replacement=_str_option(config, "message_replacement", DEFAULT_MESSAGE_REPLACEMENT, allow_empty=True),
        branch_prefix=_str_option(config, "branch_prefix", DEFAULT_BRANCH_PREFIX),
        time_shift_months=months,
    )


def load_recommit_config(config_path: Path, *, authors_path: Path | None = None) -> RecommitConfig:
    try:
        raw = load_config(config_path)
    except json.JSONDecodeError as e:
        raise ValueError(f"config file is not valid JSON: {config_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"config file must contain a JSON object: {config_path}")
    return build_config(raw, base_dir=config_path.resolve().parent, authors_path=authors_path)
