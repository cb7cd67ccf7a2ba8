"""ORM models package exports."""

from echo_social.models.anonymous_message import AnonymousMessage
from echo_social.models.comment import Comment
from echo_social.models.conversation import Conversation
from echo_social.models.conversation_participant import ConversationParticipant
from echo_social.models.echo_link import EchoLink
from echo_social.models.follow import Follow
from echo_social.models.like import Like
from echo_social.models.message import Message
from echo_social.models.notification import Notification
from echo_social.models.poll import Poll
from echo_social.models.poll_option import PollOption
from echo_social.models.poll_vote import PollVote
from echo_social.models.post import Post
from echo_social.models.user import User

__all__ = [
    "AnonymousMessage",
    "Comment",
    "Conversation",
    "ConversationParticipant",
    "EchoLink",
    "Follow",
    "Like",
    "Message",
    "Notification",
    "Poll",
    "PollOption",
    "PollVote",
    "Post",
    "User",
]
