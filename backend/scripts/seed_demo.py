"""Seed a demo account with a small social graph.

Usage (from repository root):
    python backend/scripts/seed_demo.py --database-url sqlite+pysqlite:///echo_demo.db

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make `echo_social` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from echo_social.config import get_settings
from echo_social.context import build_context
from echo_social.schemas.conversation import ConversationCreate
from echo_social.schemas.echo_link import EchoLinkCreate
from echo_social.schemas.post import FollowCreate, PollDraft, PostCreate
from echo_social.schemas.user import UserCreate
from echo_social.services.conversations import create_conversation, create_message
from echo_social.services.echo_links import create_echo_link
from echo_social.services.follows import create_follow
from echo_social.services.hooks import MESSAGE_CREATED
from echo_social.services.posts import create_post
from echo_social.services.users import create_user, get_user_by_username

DEMO_USERNAME = "demo"


def build_demo_users() -> list[UserCreate]:
    """Return the demo account followed by two friends."""

    return [
        UserCreate(
            username=DEMO_USERNAME,
            password="password",
            display_name="Demo User",
            email="demo@example.com",
            avatar="https://ui-avatars.com/api/?name=Demo+User&background=random",
            bio="This is a demo user account for testing purposes.",
        ),
        UserCreate(username="ada", password="password", display_name="Ada"),
        UserCreate(username="linus", password="password", display_name="Linus"),
    ]


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo account, posts, a chat and an echo link.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL to seed (default: DATABASE_URL from the environment).",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()
    settings = get_settings()
    if args.database_url:
        settings = settings.model_copy(update={"database_url": args.database_url})
    context = build_context(settings)
    context.create_schema()

    with context.session_factory() as db:
        if get_user_by_username(db, DEMO_USERNAME) is not None:
            print(f"Demo user already present in {settings.database_url}; nothing to do.")
            context.dispose()
            return

        demo, ada, linus = (create_user(db, payload) for payload in build_demo_users())
        for followed in (ada, linus):
            create_follow(db, FollowCreate(follower_id=demo.id, following_id=followed.id), hooks=context.hooks)
        create_post(db, PostCreate(user_id=ada.id, content="First post on Echo!"))
        create_post(
            db,
            PostCreate(
                user_id=linus.id,
                content="Settle this for me",
                poll=PollDraft(
                    question="Tabs or spaces?",
                    ends_at="2030-01-01T00:00:00Z",
                    options=["Tabs", "Spaces"],
                ),
            ),
        )
        conversation = create_conversation(db, ConversationCreate(participant_ids=[demo.id, ada.id]))
        message = create_message(db, conversation.id, ada.id, "Welcome to Echo!")
        context.hooks.run(MESSAGE_CREATED, db, message)
        echo_link = create_echo_link(db, EchoLinkCreate(user_id=demo.id, welcome_message="Ask me anything"))

    context.dispose()
    print("Seed complete")
    print(f"database_url={settings.database_url}")
    print(f"demo_user_id={demo.id}")
    print(f"conversation_id={conversation.id}")
    print(f"echo_link={echo_link.link_id}")
    print()
    print("Log in with demo / password, then inspect:")
    print(f"  GET /api/posts/feed/{demo.id}")
    print(f"  GET /api/conversations/{conversation.id}/messages")
    print(f"  GET /api/users/{demo.id}/notifications")


if __name__ == "__main__":
    main()
