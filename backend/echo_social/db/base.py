"""SQLAlchemy metadata registry import for Alembic."""

from echo_social.models import (
    AnonymousMessage,
    Comment,
    Conversation,
    ConversationParticipant,
    EchoLink,
    Follow,
    Like,
    Message,
    Notification,
    Poll,
    PollOption,
    PollVote,
    Post,
    User,
)
from echo_social.models.base import Base

__all__ = [
    "Base",
    "User",
    "Post",
    "Poll",
    "PollOption",
    "PollVote",
    "Like",
    "Comment",
    "Follow",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "EchoLink",
    "AnonymousMessage",
    "Notification",
]
