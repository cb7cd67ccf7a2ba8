"""Conversation ORM model."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from echo_social.models.base import Base, CreatedAtMixin, IdMixin


class Conversation(Base, IdMixin, CreatedAtMixin):
    """Direct or group chat thread."""

    __tablename__ = "conversations"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_group: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
