from __future__ import annotations

import dataclasses
from collections import Counter
from typing import Iterable

from .models import RewriteRecord


@dataclasses.dataclass(frozen=True)
class RewriteSummary:
    total: int
    old_authors: dict[str, int]
    new_authors: dict[str, int]


def _sorted_counts(counter: Counter[str]) -> dict[str, int]:
    return dict(sorted(counter.items(), key=lambda kv: (-kv[1], kv[0])))


def summarize(records: Iterable[RewriteRecord]) -> RewriteSummary:
    total = 0
    old: Counter[str] = Counter()
    new: Counter[str] = Counter()
    for rec in records:
        old[rec.old.author] += 1
        new[rec.new.author] += 1
        total += 1
    return RewriteSummary(total=total, old_authors=_sorted_counts(old), new_authors=_sorted_counts(new))


def _author_lines(counts: dict[str, int]) -> list[str]:
    if not counts:
        return ["  (none)"]
    width = max(len(name) for name in counts)
    return [f"  {name.ljust(width)}  {n}" for name, n in counts.items()]


def format_report(branch: str, summary: RewriteSummary, *, failed: int = 0) -> str:
    lines = [
        f"Rewritten branch: {branch}",
        f"Commits modified: {summary.total}",
    ]
    if failed:
        lines.append(f"Commits dropped: {failed}")
    lines.append("Commits by authors:")
    lines.append("Previous committers:")
    lines.extend(_author_lines(summary.old_authors))
    lines.append("New committers:")
    lines.extend(_author_lines(summary.new_authors))
    return "\n".join(lines)
