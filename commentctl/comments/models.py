"""Data models for comments: Comment, PostRecord, StoreError and status constants."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class CommentStatus(str, Enum):
    """Status verbs accepted by CommentStore.set_status()."""

    APPROVE = "approve"
    HOLD = "hold"
    SPAM = "spam"
    TRASH = "trash"


# set_status verb -> stored comment_approved value
STATUS_VALUES: dict[str, str] = {
    CommentStatus.APPROVE.value: "1",
    CommentStatus.HOLD.value: "0",
    CommentStatus.SPAM.value: "spam",
    CommentStatus.TRASH.value: "trash",
}

# stored comment_approved value -> display status (get_status)
DISPLAY_STATUS: dict[str, str] = {
    "1": "approved",
    "0": "unapproved",
    "spam": "spam",
    "trash": "trash",
}

# stored comment_approved value -> count summary key, in summary order
COUNT_KEYS: dict[str, str] = {
    "0": "moderated",
    "1": "approved",
    "spam": "spam",
    "trash": "trash",
    "post-trashed": "post-trashed",
}

TOTAL_KEY = "total_comments"

# Integers a BIGINT column can hold; ids outside it never exist.
SQL_INT_RANGE = range(-(2**63), 2**63)

TRASH_META_STATUS = "_wp_trash_meta_status"
TRASH_META_TIME = "_wp_trash_meta_time"

COMPACT_FIELDS: tuple[str, ...] = (
    "comment_ID",
    "comment_author",
    "comment_author_email",
    "comment_author_url",
    "comment_content",
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


@dataclass
class Comment:
    """One comment row. Field names follow the CMS comments table."""

    comment_ID: int = 0
    comment_post_ID: int = 0
    comment_author: str = ""
    comment_author_email: str = ""
    comment_author_url: str = ""
    comment_author_IP: str = ""
    comment_date: datetime = field(default_factory=_now_utc)
    comment_date_gmt: datetime = field(default_factory=_now_utc)
    comment_content: str = ""
    comment_karma: int = 0
    comment_approved: str = "1"
    comment_agent: str = ""
    comment_type: str = ""
    comment_parent: int = 0
    user_id: int = 0

    def as_dict(self) -> dict[str, Any]:
        """All fields in column order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


COMMENT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(Comment))


@dataclass
class PostRecord:
    """The slice of a post the comment commands need."""

    ID: int
    post_title: str = ""
    post_status: str = "publish"
    comment_count: int = 0


@dataclass(frozen=True)
class StoreError:
    """Error value returned by store calls that report structured failures."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


def parse_comment_fields(raw: dict[str, str]) -> Comment:
    """Build a Comment from an insert field map, filling defaults.

    Raises:
        KeyError: unknown field name.
        ValueError: non-numeric value for a numeric field or bad date.
    """
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in COMMENT_FIELDS or key == "comment_ID":
            raise KeyError(key)
        if key in {"comment_post_ID", "comment_karma", "comment_parent", "user_id"}:
            number = int(value)
            if number not in SQL_INT_RANGE:
                raise ValueError(f"{key} out of range: {value}")
            values[key] = number
        elif key in {"comment_date", "comment_date_gmt"}:
            stamp = datetime.fromisoformat(str(value).replace(" ", "T", 1))
            if stamp.tzinfo is not None:
                stamp = stamp.astimezone(timezone.utc).replace(tzinfo=None)
            values[key] = stamp.replace(microsecond=0)
        else:
            values[key] = str(value)
    comment = Comment(**values)
    if "comment_date" in values and "comment_date_gmt" not in values:
        comment.comment_date_gmt = comment.comment_date
    if "comment_date_gmt" in values and "comment_date" not in values:
        comment.comment_date = comment.comment_date_gmt
    return comment
