from __future__ import annotations

import calendar
import datetime as dt

from .models import CommitInfo, Identity, Signature

DEFAULT_SHIFT_MONTHS = 6


def add_months(value: dt.datetime, months: int) -> dt.datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length (Aug 31 + 6 -> Feb 28/29)."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def shift_timestamp(timestamp: int, months: int = DEFAULT_SHIFT_MONTHS) -> int:
    """Shift on the UTC calendar; the commit's own offset is not consulted, so month-end clamping follows the UTC date."""
    when = dt.datetime.fromtimestamp(timestamp, tz=dt.timezone.utc)
    return int(add_months(when, months).timestamp())


def transform_signatures(
    commit: CommitInfo,
    identity: Identity,
    *,
    change_time: bool,
    keep_author: bool,
    shift_months: int = DEFAULT_SHIFT_MONTHS,
) -> tuple[Signature, Signature]:
    """
    Returns (author, committer) for the rewritten commit.

    keep_author reuses the original signatures as they are, timestamps included.
    Otherwise both signatures take `identity`, the (optionally shifted) original
    instant and the original utc offset.
    """
    if keep_author:
        return commit.author, commit.committer

    author_time = commit.author.timestamp
    committer_time = commit.committer.timestamp
    if change_time:
        author_time = shift_timestamp(author_time, shift_months)
        committer_time = shift_timestamp(committer_time, shift_months)

    author = Signature(identity=identity, timestamp=author_time, offset_minutes=commit.author.offset_minutes)
    committer = Signature(identity=identity, timestamp=committer_time, offset_minutes=commit.committer.offset_minutes)
    return author, committer
