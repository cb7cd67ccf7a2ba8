"""Read-side composition of feeds and follower graphs."""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from echo_social.models.follow import Follow
from echo_social.models.post import Post
from echo_social.models.user import User


def get_feed_for_user(db: Session, user_id: int) -> list[Post]:
    """Own posts plus posts of followed users, newest first, ties by insertion order."""

    followed_ids = select(Follow.following_id).where(Follow.follower_id == user_id)
    stmt = (
        select(Post)
        .where(or_(Post.user_id == user_id, Post.user_id.in_(followed_ids)))
        .order_by(Post.created_at.desc(), Post.id.asc())
    )
    return list(db.scalars(stmt).all())


def get_followers(db: Session, user_id: int) -> list[User]:
    """Users following ``user_id``. Order is not guaranteed."""

    follower_ids = select(Follow.follower_id).where(Follow.following_id == user_id)
    return list(db.scalars(select(User).where(User.id.in_(follower_ids))).all())


def get_following(db: Session, user_id: int) -> list[User]:
    """Users that ``user_id`` follows. Order is not guaranteed."""

    following_ids = select(Follow.following_id).where(Follow.follower_id == user_id)
    return list(db.scalars(select(User).where(User.id.in_(following_ids))).all())
