"""Anonymous message ORM model."""

from sqlalchemy import Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from echo_social.models.base import Base, CreatedAtMixin, IdMixin


class AnonymousMessage(Base, IdMixin, CreatedAtMixin):
    """Message submitted through an echo link."""

    __tablename__ = "anonymous_messages"

    echo_link_id: Mapped[int] = mapped_column(
        ForeignKey("echo_links.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    answered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
