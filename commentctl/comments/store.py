"""Comment storage abstraction: CommentStore ABC (SqlCommentStore, InMemoryCommentStore)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from commentctl.comments.models import COUNT_KEYS, TOTAL_KEY, Comment, PostRecord, StoreError

# (comment_id, new status verb) -> awaitable; fired by set_status(..., notify=True)
StatusListener = Callable[[int, str], Awaitable[None]]


class CommentStore(ABC):
    """Abstract base for the comment and post tables of a CMS database."""

    def __init__(self) -> None:
        self._status_listeners: list[StatusListener] = []

    def add_status_listener(self, listener: StatusListener) -> None:
        """Register a callback fired after a notifying status change."""
        self._status_listeners.append(listener)

    async def _notify_status_change(self, comment_id: int, status: str) -> None:
        for listener in self._status_listeners:
            await listener(comment_id, status)

    async def close(self) -> None:
        """Release backend resources; the store is not used afterwards."""
        return None

    @abstractmethod
    async def get_post(self, post_id: int) -> PostRecord | None:
        """Return the post or None when it does not exist."""
        ...

    @abstractmethod
    async def insert(self, fields: dict[str, str]) -> int | None:
        """Low-level insert (no notifications); return the new id or None."""
        ...

    @abstractmethod
    async def delete(self, comment_id: int, force: bool = False) -> bool:
        """Trash the comment, or delete it permanently when force or already trashed/spammed."""
        ...

    @abstractmethod
    async def trash(self, comment_id: int) -> bool:
        ...

    @abstractmethod
    async def untrash(self, comment_id: int) -> bool:
        ...

    @abstractmethod
    async def spam(self, comment_id: int) -> bool:
        ...

    @abstractmethod
    async def unspam(self, comment_id: int) -> bool:
        ...

    @abstractmethod
    async def set_status(self, comment_id: int, status: str, notify: bool = False) -> StoreError | None:
        """Set status verb (approve/hold/spam/trash); None on success."""
        ...

    @abstractmethod
    async def get_comment(self, comment_id: int) -> Comment | None:
        ...

    @abstractmethod
    async def count(self, post_id: int = 0) -> dict[str, int]:
        """Per-status counts for one post (0 = whole site) plus total_comments."""
        ...

    @abstractmethod
    async def get_status(self, comment_id: int) -> str | None:
        """Display status (approved/unapproved/spam/trash) or None when unknown."""
        ...

    @abstractmethod
    async def query_recent(self, status: str = "approve", limit: int = 1) -> list[Comment]:
        """Newest comments with the given status verb, newest first."""
        ...


def build_count_summary(rows: list[tuple[str, int]]) -> dict[str, int]:
    """Count summary in store order: present statuses, total_comments, zero-filled rest.

    Trash and post-trashed comments are not part of total_comments.
    """
    stats: dict[str, int] = {}
    total = 0
    for approved, num in rows:
        if approved not in ("trash", "post-trashed"):
            total += num
        key = COUNT_KEYS.get(approved)
        if key is not None:
            stats[key] = num
    stats[TOTAL_KEY] = total
    for key in COUNT_KEYS.values():
        stats.setdefault(key, 0)
    return stats
