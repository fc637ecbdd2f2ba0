from __future__ import annotations

import dataclasses
import sys
from typing import Iterable, Protocol, Sequence

from .authors import DEFAULT_BACKEND_LABEL, DEFAULT_FRONTEND_LABEL, Picker, infer_role, pick_author
from .git import GitError
from .models import AuthorEntry, CommitFailure, CommitInfo, CommitStat, RewriteRecord, RewriteResult, Signature
from .signatures import DEFAULT_SHIFT_MONTHS, transform_signatures

DEFAULT_MESSAGE_MARKER = "MAKHROVYI"
DEFAULT_MESSAGE_REPLACEMENT = "AnotherOneProject"


class HistoryBackend(Protocol):
    def read_commit(self, commit_id: str) -> CommitInfo: ...

    def changed_paths(self, commit: CommitInfo) -> list[str]: ...

    def create_commit(
        self,
        *,
        tree: str,
        parents: list[str],
        author: Signature,
        committer: Signature,
        message: str,
        encoding: str = "",
    ) -> str: ...

    def update_branch(self, name: str, new: str, old: str) -> None: ...


@dataclasses.dataclass(frozen=True)
class RewriteRules:
    pool: Sequence[AuthorEntry]
    picker: Picker
    change_time: bool = False
    keep_author: bool = False
    backend_label: str = DEFAULT_BACKEND_LABEL
    frontend_label: str = DEFAULT_FRONTEND_LABEL
    message_marker: str = DEFAULT_MESSAGE_MARKER
    message_replacement: str = DEFAULT_MESSAGE_REPLACEMENT
    shift_months: int = DEFAULT_SHIFT_MONTHS


def replace_marker(message: str, marker: str, replacement: str) -> str:
    if not marker:
        return message
    return message.replace(marker, replacement)


def choose_author(backend: HistoryBackend, commit: CommitInfo, rules: RewriteRules) -> AuthorEntry:
    paths = backend.changed_paths(commit)
    role = infer_role(paths, backend_label=rules.backend_label, frontend_label=rules.frontend_label)
    return pick_author(rules.pool, role, rules.picker)


def new_signatures(backend: HistoryBackend, commit: CommitInfo, rules: RewriteRules) -> tuple[Signature, Signature]:
    author = choose_author(backend, commit, rules)
    return transform_signatures(
        commit,
        author.identity,
        change_time=rules.change_time,
        keep_author=rules.keep_author,
        shift_months=rules.shift_months,
    )


def _stats(commit: CommitInfo, author: Signature) -> tuple[CommitStat, CommitStat]:
    # computed before anything is written: a bad timestamp must not leave the branch half-moved
    return CommitStat(author=commit.author.name, time=commit.author.when), CommitStat(author=author.name, time=author.when)


def amend_seed(backend: HistoryBackend, branch: str, commit: CommitInfo, rules: RewriteRules) -> RewriteRecord:
    """
    Replace the branch tip (still the original first commit) with a copy carrying
    the new signatures. Message, tree and parents stay as they are.
    """
    author, committer = new_signatures(backend, commit, rules)
    old, new = _stats(commit, author)
    new_id = backend.create_commit(
        tree=commit.tree,
        parents=list(commit.parents),
        author=author,
        committer=committer,
        message=commit.message,
        encoding=commit.encoding,
    )
    backend.update_branch(branch, new_id, commit.id)
    return RewriteRecord(id=new_id, old=old, new=new)


def recommit(backend: HistoryBackend, branch: str, commit: CommitInfo, parent: str, rules: RewriteRules) -> RewriteRecord:
    author, committer = new_signatures(backend, commit, rules)
    old, new = _stats(commit, author)
    new_id = backend.create_commit(
        tree=commit.tree,
        parents=[parent],
        author=author,
        committer=committer,
        message=replace_marker(commit.message, rules.message_marker, rules.message_replacement),
        encoding=commit.encoding,
    )
    backend.update_branch(branch, new_id, parent)
    return RewriteRecord(id=new_id, old=old, new=new)


def _step(backend: HistoryBackend, branch: str, rules: RewriteRules, parent: str, commit_id: str) -> RewriteRecord | CommitFailure:
    try:
        commit = backend.read_commit(commit_id)
        return recommit(backend, branch, commit, parent, rules)
    except (GitError, ValueError, OverflowError) as e:
        print(f"Failed to recommit {commit_id}: {e}", file=sys.stderr)
        return CommitFailure(commit_id=commit_id, error=str(e))


def rewrite_history(backend: HistoryBackend, branch: str, commit_ids: Iterable[str], rules: RewriteRules) -> RewriteResult:
    """
    Rewrite `commit_ids` (oldest first) onto `branch`, which must already point
    at the first of them.

    The first commit is amended in place and any error there propagates. Every
    later commit is re-created on top of the last one that made it; a commit
    that fails is reported and left out of the new history.
    """
    ids = iter(commit_ids)
    seed_id = next(ids, None)
    if seed_id is None:
        raise GitError(f"no commits to rewrite on {branch}")

    seed = amend_seed(backend, branch, backend.read_commit(seed_id), rules)
    print("Amended the first commit...")

    records: list[RewriteRecord] = [seed]
    failures: list[CommitFailure] = []
    last = seed.id
    for commit_id in ids:
        outcome = _step(backend, branch, rules, last, commit_id)
        if isinstance(outcome, CommitFailure):
            failures.append(outcome)
            continue
        records.append(outcome)
        last = outcome.id
    return RewriteResult(records=records, failures=failures)
