from __future__ import annotations

import sys
from typing import Protocol

from .git import BranchCreationError, BranchNotFound

DEFAULT_BRANCH_PREFIX = "recommited/"


class BranchBackend(Protocol):
    def resolve(self, ref: str) -> str | None: ...

    def branch_exists(self, name: str) -> bool: ...

    def create_branch(self, name: str, commit_id: str) -> None: ...

    def delete_branch(self, name: str) -> None: ...

    def checkout_branch(self, name: str) -> None: ...


def destination_branch_name(source: str, prefix: str = DEFAULT_BRANCH_PREFIX) -> str:
    return f"{prefix}{source}"


def resolve_source_branch(backend: BranchBackend, name: str) -> tuple[str, str]:
    """
    Resolve a local branch, falling back to its origin/ remote-tracking branch.
    Returns (ref, commit id).
    """
    local = f"refs/heads/{name}"
    commit_id = backend.resolve(local)
    if commit_id:
        return local, commit_id

    print(f"Could not find branch {name!r}, trying origin/{name}", file=sys.stderr)
    remote = f"refs/remotes/origin/{name}"
    commit_id = backend.resolve(remote)
    if commit_id:
        return remote, commit_id

    raise BranchNotFound(f"could not find branch {name!r} (nor origin/{name})")


def materialize_branch(backend: BranchBackend, name: str, commit_id: str) -> None:
    """Point `name` at `commit_id` and check it out. A leftover branch of the same name is replaced once."""
    print(f"Creating branch {name!r}...")
    try:
        backend.create_branch(name, commit_id)
    except BranchCreationError:
        if not backend.branch_exists(name):
            raise
        print(f"Re-creating {name!r}...")
        backend.delete_branch(name)
        backend.create_branch(name, commit_id)
    backend.checkout_branch(name)
