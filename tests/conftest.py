from __future__ import annotations

from pathlib import Path

import pytest

from git_recommit.models import AuthorEntry
from helpers import POOL, FakeBackend, commit_file, git


@pytest.fixture
def fake() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def pool() -> tuple[AuthorEntry, ...]:
    return POOL


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    git(repo, "config", "user.name", "Original Author")
    git(repo, "config", "user.email", "original@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    commit_file(repo, "README.md", "hello\n", "init", date="2023-01-15T10:00:00+02:00")
    commit_file(repo, "server/api.py", "x = 1\n", "MAKHROVYI api", date="2023-01-16T10:00:00+02:00")
    commit_file(repo, "client/app.js", "let a;\n", "client app", date="2023-02-01T09:30:00-05:00")
    commit_file(repo, "server/db.py", "y = 2\n", "db for MAKHROVYI and MAKHROVYI", date="2023-08-31T12:00:00+00:00")
    return repo
