"""Tests for notification side effects attached to primary writes."""

from __future__ import annotations

import unittest
from unittest import mock

from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from echo_social.models.anonymous_message import AnonymousMessage
from echo_social.models.base import Base
from echo_social.models.comment import Comment
from echo_social.models.conversation import Conversation
from echo_social.models.conversation_participant import ConversationParticipant
from echo_social.models.echo_link import EchoLink
from echo_social.models.follow import Follow
from echo_social.models.like import Like
from echo_social.models.message import Message
from echo_social.models.notification import Notification
from echo_social.models.post import Post
from echo_social.models.user import User
from echo_social.schemas.conversation import ConversationCreate
from echo_social.schemas.echo_link import AnonymousMessageCreate, EchoLinkCreate
from echo_social.schemas.post import CommentCreate, FollowCreate, LikeCreate
from echo_social.schemas.user import UserCreate
from echo_social.services import notifications
from echo_social.services.conversations import create_conversation, create_message
from echo_social.services.echo_links import create_anonymous_message, create_echo_link
from echo_social.services.errors import ConflictError
from echo_social.services.follows import create_follow
from echo_social.services.hooks import LIKE_CREATED, MESSAGE_CREATED, PostCommitHooks
from echo_social.services.notifications import (
    count_unread_notifications,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    notify_post_owner_of_like,
    register_notification_hooks,
)
from echo_social.services.posts import create_comment, create_like
from echo_social.services.users import create_user


class NotificationHookTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        for model in (
            Notification,
            Message,
            ConversationParticipant,
            Conversation,
            AnonymousMessage,
            EchoLink,
            Follow,
            Comment,
            Like,
            Post,
            User,
        ):
            self.db.execute(delete(model))
        self.db.commit()
        self.hooks = register_notification_hooks(PostCommitHooks())
        self.alice = create_user(self.db, UserCreate(username="alice", password="pw", display_name="Alice"))
        self.bob = create_user(self.db, UserCreate(username="bob", password="pw", display_name="Bob"))
        self.post = Post(user_id=self.alice.id, content="hello world")
        self.db.add(self.post)
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def _notifications_for(self, user_id: int) -> list[Notification]:
        return list(self.db.scalars(select(Notification).where(Notification.user_id == user_id)))

    def test_like_notifies_post_owner(self) -> None:
        create_like(self.db, LikeCreate(user_id=self.bob.id, post_id=self.post.id), hooks=self.hooks)

        notifications = self._notifications_for(self.alice.id)
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0].type, "like")
        self.assertEqual(notifications[0].reference_id, self.post.id)
        self.assertFalse(notifications[0].read)

    def test_self_like_does_not_notify(self) -> None:
        create_like(self.db, LikeCreate(user_id=self.alice.id, post_id=self.post.id), hooks=self.hooks)
        self.assertEqual(self._notifications_for(self.alice.id), [])

    def test_duplicate_like_is_rejected_without_second_notification(self) -> None:
        payload = LikeCreate(user_id=self.bob.id, post_id=self.post.id)
        create_like(self.db, payload, hooks=self.hooks)

        with self.assertRaises(ConflictError):
            create_like(self.db, payload, hooks=self.hooks)

        self.assertEqual(len(list(self.db.scalars(select(Like)))), 1)
        self.assertEqual(len(self._notifications_for(self.alice.id)), 1)

    def test_like_racing_past_duplicate_check_is_a_conflict(self) -> None:
        payload = LikeCreate(user_id=self.bob.id, post_id=self.post.id)
        create_like(self.db, payload, hooks=self.hooks)

        with mock.patch("echo_social.services.posts.get_like_by_user_and_post", return_value=None):
            with self.assertRaises(ConflictError):
                create_like(self.db, payload, hooks=self.hooks)

        self.assertEqual(len(list(self.db.scalars(select(Like)))), 1)
        self.assertEqual(len(self._notifications_for(self.alice.id)), 1)

    def test_follow_racing_past_duplicate_check_is_a_conflict(self) -> None:
        payload = FollowCreate(follower_id=self.bob.id, following_id=self.alice.id)
        create_follow(self.db, payload, hooks=self.hooks)

        with mock.patch("echo_social.services.follows.get_follow", return_value=None):
            with self.assertRaises(ConflictError):
                create_follow(self.db, payload, hooks=self.hooks)

        self.assertEqual(len(list(self.db.scalars(select(Follow)))), 1)
        self.assertEqual(len(self._notifications_for(self.alice.id)), 1)

    def test_message_recipient_failure_does_not_skip_remaining_recipients(self) -> None:
        carol = create_user(self.db, UserCreate(username="carol", password="pw", display_name="Carol"))
        conversation = create_conversation(
            self.db,
            ConversationCreate(is_group=True, participant_ids=[self.alice.id, self.bob.id, carol.id]),
        )
        message = create_message(self.db, conversation.id, self.alice.id, "lunch?")
        real_emit = notifications.emit_notification

        def emit_unless_bob(db, user_id, *args, **kwargs):
            if user_id == self.bob.id:
                raise RuntimeError("store unavailable")
            return real_emit(db, user_id, *args, **kwargs)

        with mock.patch.object(notifications, "emit_notification", side_effect=emit_unless_bob):
            with self.assertLogs("echo_social.services.notifications", level="ERROR"):
                self.assertEqual(self.hooks.run(MESSAGE_CREATED, self.db, message), 1)

        self.assertEqual(self._notifications_for(self.bob.id), [])
        self.assertEqual([n.reference_id for n in self._notifications_for(carol.id)], [message.id])
        self.assertEqual(self._notifications_for(self.alice.id), [])

    def test_comment_notifies_post_owner(self) -> None:
        create_comment(
            self.db,
            CommentCreate(post_id=self.post.id, user_id=self.bob.id, content="nice"),
            hooks=self.hooks,
        )

        notifications = self._notifications_for(self.alice.id)
        self.assertEqual([n.type for n in notifications], ["comment"])
        self.assertEqual(notifications[0].reference_id, self.post.id)

    def test_follow_notifies_followed_user_with_follower_reference(self) -> None:
        create_follow(self.db, FollowCreate(follower_id=self.bob.id, following_id=self.alice.id), hooks=self.hooks)

        notifications = self._notifications_for(self.alice.id)
        self.assertEqual([n.type for n in notifications], ["follow"])
        self.assertEqual(notifications[0].reference_id, self.bob.id)
        self.assertEqual(self._notifications_for(self.bob.id), [])

    def test_anonymous_message_notifies_link_owner(self) -> None:
        link = create_echo_link(self.db, EchoLinkCreate(user_id=self.alice.id, link_id="alice-asks"))
        message = create_anonymous_message(
            self.db,
            AnonymousMessageCreate(echo_link_id=link.id, content="what's your favourite book?"),
            hooks=self.hooks,
        )

        notifications = self._notifications_for(self.alice.id)
        self.assertEqual([n.type for n in notifications], ["anonymous_message"])
        self.assertEqual(notifications[0].reference_id, message.id)

    def test_failing_hook_does_not_block_write_or_other_hooks(self) -> None:
        hooks = PostCommitHooks()

        def broken_hook(db, record) -> None:
            raise RuntimeError("notification backend down")

        hooks.register(LIKE_CREATED, broken_hook)
        hooks.register(LIKE_CREATED, notify_post_owner_of_like)

        with self.assertLogs("echo_social.services.hooks", level="ERROR"):
            like = create_like(self.db, LikeCreate(user_id=self.bob.id, post_id=self.post.id), hooks=hooks)

        self.assertIsNotNone(self.db.get(Like, like.id))
        self.assertEqual(len(self._notifications_for(self.alice.id)), 1)

    def test_read_flag_only_moves_forward(self) -> None:
        create_like(self.db, LikeCreate(user_id=self.bob.id, post_id=self.post.id), hooks=self.hooks)
        create_follow(self.db, FollowCreate(follower_id=self.bob.id, following_id=self.alice.id), hooks=self.hooks)
        self.assertEqual(count_unread_notifications(self.db, self.alice.id), 2)

        first = list_notifications(self.db, self.alice.id)[-1]
        self.assertTrue(mark_notification_read(self.db, first.id).read)
        self.assertTrue(mark_notification_read(self.db, first.id).read)
        self.assertEqual(count_unread_notifications(self.db, self.alice.id), 1)

        self.assertEqual(mark_all_notifications_read(self.db, self.alice.id), 1)
        self.assertEqual(count_unread_notifications(self.db, self.alice.id), 0)
        self.assertIsNone(mark_notification_read(self.db, 9999))

    def test_notifications_listed_newest_first(self) -> None:
        create_like(self.db, LikeCreate(user_id=self.bob.id, post_id=self.post.id), hooks=self.hooks)
        create_follow(self.db, FollowCreate(follower_id=self.bob.id, following_id=self.alice.id), hooks=self.hooks)

        self.assertEqual([n.type for n in list_notifications(self.db, self.alice.id)], ["follow", "like"])


if __name__ == "__main__":
    unittest.main()
