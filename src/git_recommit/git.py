from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Iterator, Optional

from .models import CommitInfo, Identity, Signature


class GitError(RuntimeError):
    pass


class RepositoryNotFound(GitError):
    pass


class BranchNotFound(GitError):
    pass


class DiffUnavailable(GitError):
    pass


class CommitCreationError(GitError):
    pass


class BranchCreationError(GitError):
    pass


class CheckoutError(GitError):
    pass


def run_git(
    args: list[str],
    cwd: Path,
    *,
    input: str | None = None,
    env: dict[str, str] | None = None,
    timeout_s: int | None = None,
) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        input=input,
        env=env,
        capture_output=True,
        text=True,
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def run_git_bytes(
    args: list[str],
    cwd: Path,
    *,
    input: bytes | None = None,
    env: dict[str, str] | None = None,
) -> tuple[int, bytes, str]:
    """Like `run_git`, but stdin/stdout stay raw bytes (commit messages must round-trip exactly)."""
    proc = subprocess.run(["git", *args], cwd=str(cwd), input=input, env=env, capture_output=True)
    return proc.returncode, proc.stdout, proc.stderr.decode("utf-8", errors="replace")


def _first_line(text: str) -> str:
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line
    return "git command failed"


def parse_signature(value: str) -> Signature:
    """
    Parse a raw commit header ident:
      Jane Doe <jane@example.com> 1673776800 +0100
    """
    ident, sep, date = value.rpartition("> ")
    if not sep or "<" not in ident:
        raise ValueError(f"invalid signature: {value!r}")
    name, _, email = ident.partition("<")
    parts = date.split()
    if len(parts) != 2:
        raise ValueError(f"invalid signature date: {value!r}")
    ts = int(parts[0])
    tz = parts[1]
    if len(tz) != 5 or tz[0] not in "+-" or not tz[1:].isdigit():
        raise ValueError(f"invalid signature offset: {value!r}")
    minutes = int(tz[1:3]) * 60 + int(tz[3:5])
    if tz[0] == "-":
        minutes = -minutes
    return Signature(identity=Identity(name=name.strip(), email=email.strip()), timestamp=ts, offset_minutes=minutes)


def parse_commit(commit_id: str, raw: bytes) -> CommitInfo:
    head, _, body = raw.partition(b"\n\n")
    headers: list[tuple[str, str]] = []
    for line in head.decode("utf-8", errors="surrogateescape").split("\n"):
        if line.startswith(" ") and headers:
            # continuation of a multi-line header (gpgsig, mergetag)
            key, value = headers[-1]
            headers[-1] = (key, value + "\n" + line[1:])
            continue
        key, _, value = line.partition(" ")
        headers.append((key, value))

    tree = ""
    parents: list[str] = []
    author: Optional[Signature] = None
    committer: Optional[Signature] = None
    encoding = ""
    for key, value in headers:
        if key == "tree":
            tree = value
        elif key == "parent":
            parents.append(value)
        elif key == "author":
            author = parse_signature(value)
        elif key == "committer":
            committer = parse_signature(value)
        elif key == "encoding":
            encoding = value
    if not tree or author is None or committer is None:
        raise ValueError(f"malformed commit object: {commit_id}")
    return CommitInfo(
        id=commit_id,
        tree=tree,
        parents=tuple(parents),
        author=author,
        committer=committer,
        message=body.decode("utf-8", errors="surrogateescape"),
        encoding=encoding,
    )


class GitRepo:
    """History backend on top of the git executable."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def open(cls, location: str | Path) -> "GitRepo":
        path = Path(location).expanduser()
        if not path.is_dir():
            raise RepositoryNotFound(f"repository not found: {path}")
        code, _, err = run_git(["rev-parse", "--git-dir"], cwd=path)
        if code != 0:
            raise RepositoryNotFound(f"not a git repository: {path} ({_first_line(err)})")
        return cls(path.resolve())

    def resolve(self, ref: str) -> str | None:
        code, out, _ = run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=self.path)
        if code != 0:
            return None
        return out.strip() or None

    def iter_commits(self, tip: str) -> Iterator[str]:
        code, out, err = run_git(["rev-list", "--reverse", "--topo-order", tip], cwd=self.path)
        if code != 0:
            raise GitError(f"could not walk history from {tip}: {_first_line(err)}")
        for line in out.splitlines():
            line = line.strip()
            if line:
                yield line

    def read_commit(self, commit_id: str) -> CommitInfo:
        code, out, err = run_git_bytes(["cat-file", "commit", commit_id], cwd=self.path)
        if code != 0:
            raise GitError(f"could not read commit {commit_id}: {_first_line(err)}")
        return parse_commit(commit_id, out)

    def changed_paths(self, commit: CommitInfo) -> list[str]:
        args = ["diff-tree", "-r", "--name-only", "-z", "--no-commit-id"]
        if commit.parents:
            args += [commit.parents[0], commit.id]
        else:
            args += ["--root", commit.id]
        code, out, err = run_git(args, cwd=self.path)
        if code != 0:
            raise DiffUnavailable(f"could not diff {commit.id}: {_first_line(err)}")
        return [p for p in out.split("\0") if p]

    def create_commit(
        self,
        *,
        tree: str,
        parents: list[str],
        author: Signature,
        committer: Signature,
        message: str,
        encoding: str = "",
    ) -> str:
        env = os.environ.copy()
        env.update(
            {
                "GIT_AUTHOR_NAME": author.name,
                "GIT_AUTHOR_EMAIL": author.email,
                "GIT_AUTHOR_DATE": author.git_date(),
                "GIT_COMMITTER_NAME": committer.name,
                "GIT_COMMITTER_EMAIL": committer.email,
                "GIT_COMMITTER_DATE": committer.git_date(),
            }
        )
        args: list[str] = []
        if encoding:
            args += ["-c", f"i18n.commitEncoding={encoding}"]
        args += ["commit-tree", "--no-gpg-sign", tree]
        for parent in parents:
            args += ["-p", parent]
        code, out, err = run_git_bytes(
            args,
            cwd=self.path,
            input=message.encode("utf-8", errors="surrogateescape"),
            env=env,
        )
        if code != 0:
            raise CommitCreationError(_first_line(err))
        return out.decode("ascii").strip()

    def update_branch(self, name: str, new: str, old: str) -> None:
        code, _, err = run_git(["update-ref", "-m", "recommit", f"refs/heads/{name}", new, old], cwd=self.path)
        if code != 0:
            raise GitError(f"could not move {name} to {new}: {_first_line(err)}")

    def branch_exists(self, name: str) -> bool:
        code, _, _ = run_git(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"], cwd=self.path)
        return code == 0

    def current_branch(self) -> str:
        code, out, _ = run_git(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=self.path)
        if code != 0:
            return ""
        return out.strip()

    def create_branch(self, name: str, commit_id: str) -> None:
        code, _, err = run_git(["branch", name, commit_id], cwd=self.path)
        if code != 0:
            raise BranchCreationError(f"could not create branch {name}: {_first_line(err)}")

    def delete_branch(self, name: str) -> None:
        if self.current_branch() == name:
            code, _, err = run_git(["checkout", "--quiet", "--detach"], cwd=self.path)
            if code != 0:
                raise BranchCreationError(f"could not leave branch {name}: {_first_line(err)}")
        code, _, err = run_git(["branch", "-D", name], cwd=self.path)
        if code != 0:
            raise BranchCreationError(f"could not delete branch {name}: {_first_line(err)}")

    def checkout_branch(self, name: str) -> None:
        code, _, err = run_git(["checkout", "--quiet", name], cwd=self.path)
        if code != 0:
            raise CheckoutError(f"could not check out {name}: {_first_line(err)}")

    def sync_worktree(self, from_commit: str, to_commit: str) -> None:
        """Carry index and working tree from `from_commit` to `to_commit`, keeping local edits."""
        code, _, err = run_git(["read-tree", "-m", "-u", from_commit, to_commit], cwd=self.path)
        if code != 0:
            raise CheckoutError(f"could not update working tree to {to_commit}: {_first_line(err)}")
