"""In-memory CommentStore backed by plain dicts (tests and dry runs)."""

from __future__ import annotations

import logging
import time
from copy import deepcopy

from commentctl.comments.models import (
    DISPLAY_STATUS,
    STATUS_VALUES,
    TRASH_META_STATUS,
    TRASH_META_TIME,
    Comment,
    PostRecord,
    StoreError,
    parse_comment_fields,
)
from commentctl.comments.store import CommentStore, build_count_summary

logger = logging.getLogger(__name__)


class InMemoryCommentStore(CommentStore):
    """In-memory store: posts, comments and comment meta kept in dicts."""

    def __init__(self, posts: list[PostRecord] | None = None) -> None:
        super().__init__()
        self._posts: dict[int, PostRecord] = {p.ID: deepcopy(p) for p in posts or []}
        self._comments: dict[int, Comment] = {}
        self._meta: dict[int, dict[str, str]] = {}
        self._next_id = 1

    def add_post(self, post: PostRecord) -> None:
        self._posts[post.ID] = deepcopy(post)

    def _refresh_post_count(self, post_id: int) -> None:
        post = self._posts.get(post_id)
        if post is None:
            return
        post.comment_count = sum(
            1 for c in self._comments.values() if c.comment_post_ID == post_id and c.comment_approved == "1"
        )

    def _set_approved(self, comment: Comment, value: str) -> None:
        comment.comment_approved = value
        self._refresh_post_count(comment.comment_post_ID)

    async def get_post(self, post_id: int) -> PostRecord | None:
        post = self._posts.get(post_id)
        return deepcopy(post) if post is not None else None

    async def insert(self, fields: dict[str, str]) -> int | None:
        try:
            comment = parse_comment_fields(fields)
        except (KeyError, ValueError) as exc:
            logger.debug("insert rejected: %s", exc)
            return None
        comment.comment_ID = self._next_id
        self._next_id += 1
        self._comments[comment.comment_ID] = comment
        self._refresh_post_count(comment.comment_post_ID)
        logger.debug("inserted comment %s", comment.comment_ID)
        return comment.comment_ID

    async def delete(self, comment_id: int, force: bool = False) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        if not force and comment.comment_approved not in ("trash", "spam"):
            return await self.trash(comment_id)
        for child in self._comments.values():
            if child.comment_parent == comment_id:
                child.comment_parent = comment.comment_parent
        self._meta.pop(comment_id, None)
        del self._comments[comment_id]
        self._refresh_post_count(comment.comment_post_ID)
        logger.debug("deleted comment %s", comment_id)
        return True

    async def trash(self, comment_id: int) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        meta = self._meta.setdefault(comment_id, {})
        meta[TRASH_META_STATUS] = comment.comment_approved
        meta[TRASH_META_TIME] = str(int(time.time()))
        self._set_approved(comment, "trash")
        return True

    async def untrash(self, comment_id: int) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        meta = self._meta.pop(comment_id, {})
        self._set_approved(comment, meta.get(TRASH_META_STATUS) or "0")
        return True

    async def spam(self, comment_id: int) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        self._meta.setdefault(comment_id, {})[TRASH_META_STATUS] = comment.comment_approved
        self._set_approved(comment, "spam")
        return True

    async def unspam(self, comment_id: int) -> bool:
        comment = self._comments.get(comment_id)
        if comment is None:
            return False
        meta = self._meta.pop(comment_id, {})
        self._set_approved(comment, meta.get(TRASH_META_STATUS) or "0")
        return True

    async def set_status(self, comment_id: int, status: str, notify: bool = False) -> StoreError | None:
        value = STATUS_VALUES.get(status)
        if value is None:
            return StoreError("invalid_status", f"Invalid comment status: {status}")
        comment = self._comments.get(comment_id)
        if comment is None:
            return StoreError("db_update_error", "Could not update comment status")
        self._set_approved(comment, value)
        if notify:
            await self._notify_status_change(comment_id, status)
        return None

    async def get_comment(self, comment_id: int) -> Comment | None:
        comment = self._comments.get(comment_id)
        return deepcopy(comment) if comment is not None else None

    async def count(self, post_id: int = 0) -> dict[str, int]:
        grouped: dict[str, int] = {}
        for comment in self._comments.values():
            if post_id and comment.comment_post_ID != post_id:
                continue
            grouped[comment.comment_approved] = grouped.get(comment.comment_approved, 0) + 1
        return build_count_summary(list(grouped.items()))

    async def get_status(self, comment_id: int) -> str | None:
        comment = self._comments.get(comment_id)
        if comment is None:
            return None
        return DISPLAY_STATUS.get(comment.comment_approved)

    async def query_recent(self, status: str = "approve", limit: int = 1) -> list[Comment]:
        value = STATUS_VALUES.get(status, status)
        matches = [c for c in self._comments.values() if c.comment_approved == value]
        matches.sort(key=lambda c: (c.comment_date_gmt, c.comment_ID), reverse=True)
        return [deepcopy(c) for c in matches[:limit]]
