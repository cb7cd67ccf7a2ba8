"""Echo link ORM model."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from echo_social.models.base import Base, CreatedAtMixin, IdMixin


class EchoLink(Base, IdMixin, CreatedAtMixin):
    """Public slug accepting anonymous messages for one user."""

    __tablename__ = "echo_links"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    link_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    welcome_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
