"""Post-commit hooks run after a primary write succeeds."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

LIKE_CREATED = "like.created"
COMMENT_CREATED = "comment.created"
FOLLOW_CREATED = "follow.created"
MESSAGE_CREATED = "message.created"
ANONYMOUS_MESSAGE_CREATED = "anonymous_message.created"

Hook = Callable[[Session, Any], object]


class PostCommitHooks:
    """Ordered side-effect callbacks keyed by event name.

    Every hook is isolated: an exception is logged and its pending session
    work rolled back, and the next hook still runs. Nothing raised here ever
    reaches the caller whose write triggered the event.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)

    def register(self, event: str, hook: Hook) -> None:
        self._hooks[event].append(hook)

    def hooks_for(self, event: str) -> list[Hook]:
        return list(self._hooks.get(event, []))

    def run(self, event: str, db: Session, record: Any) -> int:
        """Run hooks for ``event``; return how many completed without error."""

        succeeded = 0
        for hook in self.hooks_for(event):
            try:
                hook(db, record)
            except Exception:
                db.rollback()
                logger.exception(
                    "hooks.failed event=%s hook=%s record_id=%s",
                    event,
                    getattr(hook, "__name__", repr(hook)),
                    getattr(record, "id", None),
                )
                continue
            succeeded += 1
        return succeeded
