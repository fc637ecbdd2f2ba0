from __future__ import annotations

import dataclasses
import datetime as dt

ROLE_BACKEND = "backend"
ROLE_FRONTEND = "frontend"
ROLES = (ROLE_BACKEND, ROLE_FRONTEND)


@dataclasses.dataclass(frozen=True)
class Identity:
    name: str
    email: str


@dataclasses.dataclass(frozen=True)
class AuthorEntry:
    identity: Identity
    role: str

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def email(self) -> str:
        return self.identity.email


@dataclasses.dataclass(frozen=True)
class Signature:
    identity: Identity
    timestamp: int  # unix seconds
    offset_minutes: int  # utc offset, east positive

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def when(self) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.timestamp, tz=dt.timezone.utc)

    def offset_str(self) -> str:
        sign = "+" if self.offset_minutes >= 0 else "-"
        minutes = abs(self.offset_minutes)
        return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"

    def git_date(self) -> str:
        return f"@{self.timestamp} {self.offset_str()}"


@dataclasses.dataclass(frozen=True)
class CommitInfo:
    id: str
    tree: str
    parents: tuple[str, ...]
    author: Signature
    committer: Signature
    message: str
    encoding: str = ""

    @property
    def is_root(self) -> bool:
        return not self.parents


@dataclasses.dataclass(frozen=True)
class CommitStat:
    author: str
    time: dt.datetime


@dataclasses.dataclass(frozen=True)
class RewriteRecord:
    id: str
    old: CommitStat
    new: CommitStat


@dataclasses.dataclass(frozen=True)
class CommitFailure:
    commit_id: str
    error: str


@dataclasses.dataclass
class RewriteResult:
    records: list[RewriteRecord]
    failures: list[CommitFailure]

    @property
    def tip(self) -> str:
        return self.records[-1].id if self.records else ""


@dataclasses.dataclass(frozen=True)
class RecommitOptions:
    branch: str = "master"
    change_time: bool = False
    keep_author: bool = False
