"""Trash / untrash / spam / unspam: verb -> store call and messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from commentctl.comments.store import CommentStore


class TransitionVerb(str, Enum):
    """Status transitions that share one command path."""

    TRASH = "trash"
    UNTRASH = "untrash"
    SPAM = "spam"
    UNSPAM = "unspam"


@dataclass(frozen=True)
class Transition:
    """Store call plus the success/failure message prefixes for one verb."""

    call: Callable[[CommentStore, int], Awaitable[bool]]
    success: str
    failure: str


TRANSITIONS: dict[TransitionVerb, Transition] = {
    TransitionVerb.TRASH: Transition(lambda store, cid: store.trash(cid), "Trashed", "Failed trashing"),
    TransitionVerb.UNTRASH: Transition(lambda store, cid: store.untrash(cid), "Untrashed", "Failed untrashing"),
    TransitionVerb.SPAM: Transition(lambda store, cid: store.spam(cid), "Marked as spam", "Failed marking as spam"),
    TransitionVerb.UNSPAM: Transition(lambda store, cid: store.unspam(cid), "Unspammed", "Failed unspamming"),
}
