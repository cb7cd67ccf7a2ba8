"""Post, poll, like, comment and follow schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from echo_social.schemas.common import CamelModel, Id


class PollDraft(CamelModel):
    """Poll created together with its post."""

    question: str = Field(min_length=1)
    ends_at: datetime
    is_anonymous: bool = False
    options: list[str] = Field(min_length=2)

    @model_validator(mode="after")
    def validate_options(self) -> "PollDraft":
        if any(not option.strip() for option in self.options):
            raise ValueError("Poll options cannot be blank.")
        return self


class PostCreate(CamelModel):
    user_id: Id
    content: str = ""
    media_url: str | None = None
    media_type: Literal["image", "video"] | None = None
    poll: PollDraft | None = None

    @model_validator(mode="after")
    def validate_has_body(self) -> "PostCreate":
        if not self.content.strip() and not self.media_url and self.poll is None:
            raise ValueError("A post needs content, media or a poll.")
        return self


class PostRead(CamelModel):
    id: int
    user_id: int
    content: str
    media_url: str | None = None
    media_type: str | None = None
    created_at: datetime


class PollCreate(PollDraft):
    """Stand-alone poll creation for an existing post."""

    post_id: Id


class PollOptionCreate(CamelModel):
    poll_id: Id
    text: str = Field(min_length=1, max_length=255)


class PollOptionRead(CamelModel):
    id: int
    poll_id: int
    text: str
    created_at: datetime


class PollRead(CamelModel):
    id: int
    post_id: int
    question: str
    ends_at: datetime
    is_anonymous: bool
    created_at: datetime
    options: list[PollOptionRead] = Field(default_factory=list)


class PostWithPollRead(PostRead):
    poll: PollRead | None = None


class PollVoteCreate(CamelModel):
    poll_id: Id
    option_id: Id
    user_id: Id


class PollVoteRead(CamelModel):
    id: int
    poll_id: int
    option_id: int
    user_id: int
    created_at: datetime


class LikeCreate(CamelModel):
    user_id: Id
    post_id: Id


class LikeRead(CamelModel):
    id: int
    user_id: int
    post_id: int
    created_at: datetime


class CommentCreate(CamelModel):
    post_id: Id
    user_id: Id
    content: str = Field(min_length=1)


class CommentRead(CamelModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime


class FollowCreate(CamelModel):
    follower_id: Id
    following_id: Id


class FollowRead(CamelModel):
    id: int
    follower_id: int
    following_id: int
    created_at: datetime
