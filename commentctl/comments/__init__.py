"""Comment commands: dispatcher, outcomes and comment stores."""

from commentctl.comments.dispatcher import CommentCommandDispatcher
from commentctl.comments.models import Comment, CommentStatus, PostRecord, StoreError
from commentctl.comments.outcome import LineKind, Outcome, OutputLine
from commentctl.comments.store import CommentStore
from commentctl.comments.store_inmemory import InMemoryCommentStore
from commentctl.comments.transitions import TRANSITIONS, TransitionVerb

__all__ = [
    "Comment",
    "CommentCommandDispatcher",
    "CommentStatus",
    "CommentStore",
    "InMemoryCommentStore",
    "LineKind",
    "Outcome",
    "OutputLine",
    "PostRecord",
    "StoreError",
    "TRANSITIONS",
    "TransitionVerb",
]
