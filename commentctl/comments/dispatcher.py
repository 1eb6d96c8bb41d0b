"""Comment command dispatcher: one CLI operation -> one store call -> Outcome."""

from __future__ import annotations

import logging

from commentctl.comments.models import COMMENT_FIELDS, COMPACT_FIELDS, SQL_INT_RANGE, TOTAL_KEY, CommentStatus
from commentctl.comments.outcome import Outcome, header, line
from commentctl.comments.store import CommentStore
from commentctl.comments.transitions import TRANSITIONS, TransitionVerb

logger = logging.getLogger(__name__)

POST_ID_FIELD = "comment_post_ID"
COUNT_LABEL_WIDTH = 17
FIELD_LABEL_WIDTH = 23


def _to_int(raw: int | str | None, out_of_range: int = 0) -> int:
    """Integer value of a comment/post reference.

    Non-numeric input is 0 (never exists); numbers no id column can hold become `out_of_range`.
    """
    if raw is None:
        return 0
    try:
        value = int(str(raw).strip())
    except ValueError:
        return 0
    return value if value in SQL_INT_RANGE else out_of_range


class CommentCommandDispatcher:
    """Runs comment commands against a CommentStore.

    Every method returns an Outcome; none of them prints or exits.
    """

    def __init__(self, store: CommentStore) -> None:
        self._store = store

    async def create(self, fields: dict[str, str], porcelain: bool = False) -> Outcome:
        raw_post_id = fields.get(POST_ID_FIELD, "")
        post = await self._store.get_post(_to_int(raw_post_id))
        if post is None:
            return Outcome.fail(f"Cannot find post {raw_post_id}")

        # Low-level insert: no notifications or moderation side effects.
        comment_id = await self._store.insert(fields)
        if not comment_id:
            return Outcome.fail("Could not create comment")

        logger.info("created comment %s on post %s", comment_id, post.ID)
        if porcelain:
            return Outcome.ok(line(comment_id))
        return Outcome.success(f"Inserted comment {comment_id}.")

    async def delete(self, comment_id: int | str, force: bool = False) -> Outcome:
        if await self._store.delete(_to_int(comment_id), force):
            return Outcome.success(f"Deleted comment {comment_id}.")
        return Outcome.fail(f"Failed deleting comment {comment_id}")

    async def transition(self, verb: TransitionVerb, comment_id: int | str) -> Outcome:
        transition = TRANSITIONS[verb]
        if await transition.call(self._store, _to_int(comment_id)):
            return Outcome.success(f"{transition.success} comment {comment_id}.")
        return Outcome.fail(f"{transition.failure} comment {comment_id}")

    async def trash(self, comment_id: int | str) -> Outcome:
        return await self.transition(TransitionVerb.TRASH, comment_id)

    async def untrash(self, comment_id: int | str) -> Outcome:
        return await self.transition(TransitionVerb.UNTRASH, comment_id)

    async def spam(self, comment_id: int | str) -> Outcome:
        return await self.transition(TransitionVerb.SPAM, comment_id)

    async def unspam(self, comment_id: int | str) -> Outcome:
        return await self.transition(TransitionVerb.UNSPAM, comment_id)

    async def check_exists(self, raw_id: int | str) -> Outcome | None:
        """None when the comment exists, else the failure to report."""
        comment = await self._store.get_comment(_to_int(raw_id))
        if comment is None:
            return Outcome.fail(f"Comment with ID {raw_id} does not exist.")
        return None

    async def _set_status(self, comment_id: int | str, status: CommentStatus, verb: str) -> Outcome:
        # Unlike trash/spam, approve and unapprove report a missing comment up front.
        missing = await self.check_exists(comment_id)
        if missing is not None:
            return missing
        error = await self._store.set_status(_to_int(comment_id), status.value, notify=True)
        if error is not None:
            return Outcome.fail(str(error))
        return Outcome.success(f"{verb} comment {comment_id}")

    async def approve(self, comment_id: int | str) -> Outcome:
        return await self._set_status(comment_id, CommentStatus.APPROVE, "Approved")

    async def unapprove(self, comment_id: int | str) -> Outcome:
        return await self._set_status(comment_id, CommentStatus.HOLD, "Unapproved")

    async def count(self, post_id: int | str | None = None) -> Outcome:
        # -1 matches no post, where 0 would count the whole site
        stats = dict(await self._store.count(_to_int(post_id, out_of_range=-1)))
        total = stats.pop(TOTAL_KEY, 0)
        stats[TOTAL_KEY] = total
        return Outcome.ok(*(line(f"{status + ':':<{COUNT_LABEL_WIDTH}}{num}") for status, num in stats.items()))

    async def status(self, comment_id: int | str) -> Outcome:
        status = await self._store.get_status(_to_int(comment_id))
        if not status:
            return Outcome.fail(f"Could not check status of comment {comment_id}.")
        return Outcome.ok(line(status))

    async def last(self, id_only: bool = False, full: bool = False) -> Outcome:
        recent = await self._store.query_recent(status=CommentStatus.APPROVE.value, limit=1)
        if not recent:
            return Outcome.fail("No approved comments found.")
        comment = recent[0]

        if id_only:
            # --id exits 1 even when the lookup succeeds.
            return Outcome.ok(line(comment.comment_ID), exit_code=1)

        values = comment.as_dict()
        keys = COMMENT_FIELDS if full else COMPACT_FIELDS
        return Outcome.ok(
            header("Last approved comment:"),
            *(line(f"{key + ':':<{FIELD_LABEL_WIDTH}}{values[key]}") for key in keys),
        )
