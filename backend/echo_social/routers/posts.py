"""Post, poll, like and comment routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Response
from sqlalchemy.orm import Session

from echo_social.context import ServerContext
from echo_social.db.dependencies import get_context, get_db
from echo_social.schemas.common import MAX_ID
from echo_social.schemas.post import (
    CommentCreate,
    CommentRead,
    LikeCreate,
    LikeRead,
    PollCreate,
    PollOptionCreate,
    PollOptionRead,
    PollRead,
    PollVoteCreate,
    PollVoteRead,
    PostCreate,
    PostRead,
    PostWithPollRead,
)
from echo_social.services.feed import get_feed_for_user
from echo_social.services.posts import (
    add_poll_option,
    cast_poll_vote,
    create_comment,
    create_like,
    create_poll,
    create_post,
    delete_comment,
    delete_like,
    delete_post,
    get_post,
    list_comments,
    list_likes,
    list_poll_options,
    list_poll_votes,
    list_polls_by_post,
    list_posts,
)

router = APIRouter()


@router.get("/posts", response_model=list[PostRead])
def read_posts(db: Session = Depends(get_db)) -> list[PostRead]:
    return [PostRead.model_validate(post) for post in list_posts(db)]


@router.get("/posts/feed/{user_id}", response_model=list[PostRead])
def read_feed(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[PostRead]:
    """Home feed: own posts and posts of followed users, newest first."""

    return [PostRead.model_validate(post) for post in get_feed_for_user(db, user_id)]


@router.get("/posts/{post_id}", response_model=PostRead)
def read_post(post_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> PostRead:
    post = get_post(db, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostRead.model_validate(post)


@router.post("/posts", response_model=PostWithPollRead, status_code=201)
def add_post(payload: PostCreate, db: Session = Depends(get_db)) -> PostWithPollRead:
    """Create a post, with its poll when one is attached."""

    return create_post(db, payload)


@router.delete("/posts/{post_id}", status_code=204)
def remove_post(post_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> Response:
    if not delete_post(db, post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return Response(status_code=204)


@router.get("/posts/{post_id}/polls", response_model=list[PollRead])
def read_post_polls(post_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[PollRead]:
    return list_polls_by_post(db, post_id)


@router.post("/polls", response_model=PollRead, status_code=201)
def add_poll(payload: PollCreate, db: Session = Depends(get_db)) -> PollRead:
    return create_poll(db, payload)


@router.post("/poll-options", response_model=PollOptionRead, status_code=201)
def add_option(payload: PollOptionCreate, db: Session = Depends(get_db)) -> PollOptionRead:
    return PollOptionRead.model_validate(add_poll_option(db, payload))


@router.get("/polls/{poll_id}/options", response_model=list[PollOptionRead])
def read_poll_options(poll_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[PollOptionRead]:
    return [PollOptionRead.model_validate(option) for option in list_poll_options(db, poll_id)]


@router.get("/polls/{poll_id}/votes", response_model=list[PollVoteRead])
def read_poll_votes(poll_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[PollVoteRead]:
    return [PollVoteRead.model_validate(vote) for vote in list_poll_votes(db, poll_id)]


@router.post("/polls/vote", response_model=PollVoteRead, status_code=201)
def vote(payload: PollVoteCreate, db: Session = Depends(get_db)) -> PollVoteRead:
    """Vote on a poll, replacing the user's previous vote."""

    return PollVoteRead.model_validate(cast_poll_vote(db, payload))


@router.get("/posts/{post_id}/likes", response_model=list[LikeRead])
def read_likes(post_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[LikeRead]:
    return [LikeRead.model_validate(like) for like in list_likes(db, post_id)]


@router.post("/likes", response_model=LikeRead, status_code=201)
def add_like(
    payload: LikeCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> LikeRead:
    """Like a post. A second like by the same user is rejected."""

    return LikeRead.model_validate(create_like(db, payload, hooks=context.hooks))


@router.delete("/likes/{like_id}", status_code=204)
def remove_like(like_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> Response:
    if not delete_like(db, like_id):
        raise HTTPException(status_code=404, detail="Like not found")
    return Response(status_code=204)


@router.get("/posts/{post_id}/comments", response_model=list[CommentRead])
def read_comments(post_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[CommentRead]:
    return [CommentRead.model_validate(comment) for comment in list_comments(db, post_id)]


@router.post("/comments", response_model=CommentRead, status_code=201)
def add_comment(
    payload: CommentCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> CommentRead:
    return CommentRead.model_validate(create_comment(db, payload, hooks=context.hooks))


@router.delete("/comments/{comment_id}", status_code=204)
def remove_comment(comment_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> Response:
    if not delete_comment(db, comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return Response(status_code=204)
