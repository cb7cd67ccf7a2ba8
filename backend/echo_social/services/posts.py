"""Post, poll, like and comment services."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_social.models.comment import Comment
from echo_social.models.like import Like
from echo_social.models.poll import Poll
from echo_social.models.poll_option import PollOption
from echo_social.models.poll_vote import PollVote
from echo_social.models.post import Post
from echo_social.models.user import User
from echo_social.schemas.post import (
    CommentCreate,
    LikeCreate,
    PollCreate,
    PollDraft,
    PollOptionCreate,
    PollOptionRead,
    PollRead,
    PollVoteCreate,
    PostCreate,
    PostRead,
    PostWithPollRead,
)
from echo_social.services.errors import ConflictError, InvalidOperationError, NotFoundError
from echo_social.services.hooks import COMMENT_CREATED, LIKE_CREATED, PostCommitHooks

logger = logging.getLogger(__name__)


def list_posts(db: Session) -> list[Post]:
    stmt = select(Post).order_by(Post.created_at.desc(), Post.id.asc())
    return list(db.scalars(stmt).all())


def get_post(db: Session, post_id: int) -> Post | None:
    return db.get(Post, post_id)


def list_posts_by_user(db: Session, user_id: int) -> list[Post]:
    stmt = select(Post).where(Post.user_id == user_id).order_by(Post.created_at.desc(), Post.id.asc())
    return list(db.scalars(stmt).all())


def create_post(db: Session, payload: PostCreate) -> PostWithPollRead:
    """Create a post and its optional poll with options as one unit of work."""

    if db.get(User, payload.user_id) is None:
        raise NotFoundError("User not found")
    try:
        post = Post(
            user_id=payload.user_id,
            content=payload.content.strip(),
            media_url=payload.media_url,
            media_type=payload.media_type,
        )
        db.add(post)
        db.flush()
        poll = _add_poll(db, post.id, payload.poll) if payload.poll is not None else None
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(post)
    logger.info("posts.created post_id=%s user_id=%s with_poll=%s", post.id, post.user_id, poll is not None)
    return PostWithPollRead(
        **PostRead.model_validate(post).model_dump(),
        poll=_poll_read(db, poll) if poll is not None else None,
    )


def delete_post(db: Session, post_id: int) -> bool:
    """Delete a post together with its likes, comments and polls."""

    post = db.get(Post, post_id)
    if post is None:
        return False
    poll_ids = list(db.scalars(select(Poll.id).where(Poll.post_id == post_id)).all())
    if poll_ids:
        db.execute(delete(PollVote).where(PollVote.poll_id.in_(poll_ids)))
        db.execute(delete(PollOption).where(PollOption.poll_id.in_(poll_ids)))
        db.execute(delete(Poll).where(Poll.id.in_(poll_ids)))
    db.execute(delete(Like).where(Like.post_id == post_id))
    db.execute(delete(Comment).where(Comment.post_id == post_id))
    db.delete(post)
    db.commit()
    return True


def create_poll(db: Session, payload: PollCreate) -> PollRead:
    """Create a poll and all of its options, or nothing."""

    if db.get(Post, payload.post_id) is None:
        raise NotFoundError("Post not found")
    try:
        poll = _add_poll(db, payload.post_id, payload)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return _poll_read(db, poll)


def add_poll_option(db: Session, payload: PollOptionCreate) -> PollOption:
    if db.get(Poll, payload.poll_id) is None:
        raise NotFoundError("Poll not found")
    option = PollOption(poll_id=payload.poll_id, text=payload.text.strip())
    db.add(option)
    db.commit()
    db.refresh(option)
    return option


def list_polls_by_post(db: Session, post_id: int) -> list[PollRead]:
    polls = db.scalars(select(Poll).where(Poll.post_id == post_id).order_by(Poll.id.asc())).all()
    return [_poll_read(db, poll) for poll in polls]


def list_poll_options(db: Session, poll_id: int) -> list[PollOption]:
    stmt = select(PollOption).where(PollOption.poll_id == poll_id).order_by(PollOption.id.asc())
    return list(db.scalars(stmt).all())


def list_poll_votes(db: Session, poll_id: int) -> list[PollVote]:
    stmt = select(PollVote).where(PollVote.poll_id == poll_id).order_by(PollVote.id.asc())
    return list(db.scalars(stmt).all())


def cast_poll_vote(db: Session, payload: PollVoteCreate) -> PollVote:
    """Record a vote; a user's earlier vote on the same poll is replaced."""

    option = db.get(PollOption, payload.option_id)
    if option is None or option.poll_id != payload.poll_id:
        raise NotFoundError("Poll option not found")
    db.execute(delete(PollVote).where(PollVote.poll_id == payload.poll_id, PollVote.user_id == payload.user_id))
    vote = PollVote(poll_id=payload.poll_id, option_id=payload.option_id, user_id=payload.user_id)
    db.add(vote)
    db.commit()
    db.refresh(vote)
    return vote


def list_likes(db: Session, post_id: int) -> list[Like]:
    return list(db.scalars(select(Like).where(Like.post_id == post_id).order_by(Like.id.asc())).all())


def get_like_by_user_and_post(db: Session, user_id: int, post_id: int) -> Like | None:
    return db.scalar(select(Like).where(Like.user_id == user_id, Like.post_id == post_id))


def create_like(db: Session, payload: LikeCreate, *, hooks: PostCommitHooks | None = None) -> Like:
    """Like a post once; notifies the post owner after the like is stored."""

    if get_like_by_user_and_post(db, payload.user_id, payload.post_id) is not None:
        raise ConflictError("User already liked this post")
    if db.get(Post, payload.post_id) is None:
        raise NotFoundError("Post not found")
    like = Like(user_id=payload.user_id, post_id=payload.post_id)
    db.add(like)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already liked this post") from None
    db.refresh(like)
    if hooks is not None:
        hooks.run(LIKE_CREATED, db, like)
    return like


def delete_like(db: Session, like_id: int) -> bool:
    like = db.get(Like, like_id)
    if like is None:
        return False
    db.delete(like)
    db.commit()
    return True


def list_comments(db: Session, post_id: int) -> list[Comment]:
    """Comments of a post oldest first."""

    stmt = select(Comment).where(Comment.post_id == post_id).order_by(Comment.created_at.asc(), Comment.id.asc())
    return list(db.scalars(stmt).all())


def create_comment(db: Session, payload: CommentCreate, *, hooks: PostCommitHooks | None = None) -> Comment:
    content = payload.content.strip()
    if not content:
        raise InvalidOperationError("Comment content cannot be empty.")
    if db.get(Post, payload.post_id) is None:
        raise NotFoundError("Post not found")
    comment = Comment(post_id=payload.post_id, user_id=payload.user_id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    if hooks is not None:
        hooks.run(COMMENT_CREATED, db, comment)
    return comment


def delete_comment(db: Session, comment_id: int) -> bool:
    comment = db.get(Comment, comment_id)
    if comment is None:
        return False
    db.delete(comment)
    db.commit()
    return True


def _add_poll(db: Session, post_id: int, draft: PollDraft) -> Poll:
    poll = Poll(
        post_id=post_id,
        question=draft.question.strip(),
        ends_at=draft.ends_at,
        is_anonymous=draft.is_anonymous,
    )
    db.add(poll)
    db.flush()
    for text in draft.options:
        db.add(PollOption(poll_id=poll.id, text=text.strip()))
    db.flush()
    return poll


def _poll_read(db: Session, poll: Poll) -> PollRead:
    return PollRead(
        id=poll.id,
        post_id=poll.post_id,
        question=poll.question,
        ends_at=poll.ends_at,
        is_anonymous=poll.is_anonymous,
        created_at=poll.created_at,
        options=[PollOptionRead.model_validate(option) for option in list_poll_options(db, poll.id)],
    )
