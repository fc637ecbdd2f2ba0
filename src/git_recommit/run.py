from __future__ import annotations

import itertools
import sys
from pathlib import Path

from .authors import Picker, default_picker
from .branch import destination_branch_name, materialize_branch, resolve_source_branch
from .config import RecommitConfig
from .git import CheckoutError, GitError, GitRepo
from .models import RecommitOptions, RewriteResult
from .report import format_report, summarize
from .rewrite import RewriteRules, rewrite_history


def format_startup_header(*, repo: Path, options: RecommitOptions, config: RecommitConfig, destination: str) -> str:
    roles: dict[str, int] = {}
    for a in config.authors:
        roles[a.role] = roles.get(a.role, 0) + 1
    pool = ", ".join(f"{n} {role}" for role, n in sorted(roles.items()))
    lines = [
        "┌──────────────────────────────────────────────────────────────┐",
        "│                         git-recommit                         │",
        "└──────────────────────────────────────────────────────────────┘",
        "",
        f"- Repository: {repo}",
        f"- Source branch: {options.branch} (falls back to origin/{options.branch})",
        f"- Destination branch: {destination} (re-created if it exists)",
        f"- Author pool: {len(config.authors)} authors ({pool})",
        f"- Authors: {'kept' if options.keep_author else 'reassigned by role'}"
        f"  Time shift: {f'+{config.time_shift_months} months' if options.change_time else 'off'}",
        "",
        "Run plan:",
        f"1) Resolve {options.branch} and walk its history (oldest first).",
        f"2) Create and check out {destination} at the first commit.",
        "3) Amend the first commit, then re-create every later commit on top of it.",
        "4) Print the per-author summary.",
        "",
        "The source branch is never modified; failed commits are dropped from the new branch.",
        "",
    ]
    return "\n".join(lines)


def _print_summary(destination: str, result: RewriteResult) -> None:
    try:
        text = format_report(destination, summarize(result.records), failed=len(result.failures))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        print("Failed to summarize modified commits", file=sys.stderr)
        print(str(e), file=sys.stderr)
        return
    print(text)


def run_recommit(
    *,
    repo: str | Path,
    options: RecommitOptions,
    config: RecommitConfig,
    picker: Picker | None = None,
) -> int:
    destination = destination_branch_name(options.branch, config.branch_prefix)
    print(format_startup_header(repo=Path(repo), options=options, config=config, destination=destination))

    rules = RewriteRules(
        pool=config.authors,
        picker=picker or default_picker(),
        change_time=options.change_time,
        keep_author=options.keep_author,
        backend_label=config.backend_label,
        frontend_label=config.frontend_label,
        message_marker=config.message_marker,
        message_replacement=config.message_replacement,
        shift_months=config.time_shift_months,
    )

    try:
        backend = GitRepo.open(repo)
        ref, tip = resolve_source_branch(backend, options.branch)
        print(f"Source: {ref} at {tip}")

        commit_ids = backend.iter_commits(tip)
        first = next(commit_ids, None)
        if first is None:
            raise GitError(f"{ref} has no commits")

        materialize_branch(backend, destination, first)
        result = rewrite_history(backend, destination, itertools.chain([first], commit_ids), rules)
    except (GitError, ValueError, OverflowError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if len(result.records) > 1:
        try:
            backend.sync_worktree(result.records[0].id, result.tip)
        except CheckoutError as e:
            print(f"Warning: {e}", file=sys.stderr)
            print(f"The branch is complete; run `git checkout -f {destination}` to refresh the working tree.", file=sys.stderr)

    if result.failures:
        print(f"Dropped {len(result.failures)} commit(s) that could not be rewritten:", file=sys.stderr)
        for f in result.failures:
            print(f"- {f.commit_id}: {f.error}", file=sys.stderr)

    _print_summary(destination, result)
    return 0
