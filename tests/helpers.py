from __future__ import annotations

import datetime as dt
import os
import subprocess
from pathlib import Path
from typing import Iterator

from git_recommit.git import BranchCreationError, CheckoutError, CommitCreationError, DiffUnavailable, GitError
from git_recommit.models import ROLE_BACKEND, ROLE_FRONTEND, AuthorEntry, CommitInfo, Identity, Signature


def ts(year: int, month: int, day: int, hour: int = 0) -> int:
    return int(dt.datetime(year, month, day, hour, tzinfo=dt.timezone.utc).timestamp())


POOL = (
    AuthorEntry(identity=Identity("Alice", "alice@example.com"), role=ROLE_BACKEND),
    AuthorEntry(identity=Identity("Bob", "bob@example.com"), role=ROLE_BACKEND),
    AuthorEntry(identity=Identity("Carol", "carol@example.com"), role=ROLE_FRONTEND),
)


class FakeBackend:
    """In-memory history: commits, branches and a checked-out branch."""

    def __init__(self) -> None:
        self.commits: dict[str, CommitInfo] = {}
        self.paths: dict[str, list[str]] = {}
        self.branches: dict[str, str] = {}
        self.remotes: dict[str, str] = {}
        self.current = ""
        self.fail_diff: set[str] = set()
        self.fail_trees: set[str] = set()
        self.fail_create_branch = False
        self._n = 0

    def add_history(self, entries: list[dict]) -> list[str]:
        ids: list[str] = []
        for i, entry in enumerate(entries):
            commit_id = f"c{i}"
            when = entry.get("time", ts(2023, 1, 15, 10) + i * 3600)
            author = Signature(Identity(entry.get("author", "Orig"), "orig@example.com"), when, entry.get("offset", 120))
            committer = Signature(Identity(entry.get("author", "Orig"), "orig@example.com"), when + 60, entry.get("offset", 120))
            self.commits[commit_id] = CommitInfo(
                id=commit_id,
                tree=f"t{i}",
                parents=(ids[-1],) if ids else (),
                author=author,
                committer=committer,
                message=entry.get("message", f"commit {i}\n"),
            )
            self.paths[commit_id] = list(entry.get("paths", [f"file{i}.txt"]))
            ids.append(commit_id)
        self.branches["master"] = ids[-1]
        self.current = "master"
        return ids

    # history
    def resolve(self, ref: str) -> str | None:
        if ref.startswith("refs/heads/"):
            return self.branches.get(ref[len("refs/heads/") :])
        if ref.startswith("refs/remotes/origin/"):
            return self.remotes.get(ref[len("refs/remotes/origin/") :])
        return None

    def iter_commits(self, tip: str) -> Iterator[str]:
        chain: list[str] = []
        cur: str | None = tip
        while cur:
            chain.append(cur)
            parents = self.commits[cur].parents
            cur = parents[0] if parents else None
        yield from reversed(chain)

    def read_commit(self, commit_id: str) -> CommitInfo:
        if commit_id not in self.commits:
            raise GitError(f"unknown commit {commit_id}")
        return self.commits[commit_id]

    def changed_paths(self, commit: CommitInfo) -> list[str]:
        if commit.id in self.fail_diff:
            raise DiffUnavailable(f"no diff for {commit.id}")
        return list(self.paths.get(commit.id, []))

    def create_commit(self, *, tree, parents, author, committer, message, encoding="") -> str:
        if tree in self.fail_trees:
            raise CommitCreationError(f"cannot write tree {tree}")
        self._n += 1
        new_id = f"n{self._n}"
        self.commits[new_id] = CommitInfo(
            id=new_id,
            tree=tree,
            parents=tuple(parents),
            author=author,
            committer=committer,
            message=message,
            encoding=encoding,
        )
        return new_id

    def update_branch(self, name: str, new: str, old: str) -> None:
        if self.branches.get(name) != old:
            raise GitError(f"{name} moved")
        self.branches[name] = new

    # branches
    def branch_exists(self, name: str) -> bool:
        return name in self.branches

    def create_branch(self, name: str, commit_id: str) -> None:
        if self.fail_create_branch or name in self.branches:
            raise BranchCreationError(f"could not create branch {name}")
        self.branches[name] = commit_id

    def delete_branch(self, name: str) -> None:
        if self.current == name:
            self.current = ""
        del self.branches[name]

    def checkout_branch(self, name: str) -> None:
        if name not in self.branches:
            raise CheckoutError(f"no branch {name}")
        self.current = name


def git(repo: Path, *args: str, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(["git", *args], cwd=str(repo), env=env, check=True, capture_output=True, text=True)
    return proc.stdout.strip()


def commit_file(repo: Path, rel: str, content: str, message: str, *, date: str) -> None:
    path = repo / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    git(repo, "add", rel)
    env = os.environ.copy()
    env["GIT_AUTHOR_DATE"] = date
    env["GIT_COMMITTER_DATE"] = date
    git(repo, "commit", "-q", "-m", message, env=env)


