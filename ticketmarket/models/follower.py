import sqlalchemy as sa
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, CreatedAtMixin, IntPrimaryKeyMixin


class Follower(Base, IntPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "followers"
    __table_args__ = (
        UniqueConstraint("follower_id", "organizer_id", name="uq_followers_follower_organizer"),
    )

    follower_id: Mapped[int] = mapped_column(
        sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    organizer_id: Mapped[int] = mapped_column(
        sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
