import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, CreatedAtMixin, IntPrimaryKeyMixin


class Wishlist(Base, IntPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "wishlists"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_wishlists_user_event"),)

    user_id: Mapped[int] = mapped_column(
        sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_id: Mapped[int] = mapped_column(
        sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
