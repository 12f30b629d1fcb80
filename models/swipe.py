import enum

from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, Index, String, UniqueConstraint

from .base import Base, utcnow


class SwipeDirection(str, enum.Enum):
    left = "left"
    right = "right"
    super = "super"


POSITIVE_DIRECTIONS = (SwipeDirection.right.value, SwipeDirection.super.value)


class Swipe(Base):
    __tablename__ = "swipes"

    id = Column(BigInteger, primary_key=True)
    room_id = Column(BigInteger, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(BigInteger, ForeignKey("room_members.id", ondelete="CASCADE"), nullable=False)
    item_id = Column(BigInteger, nullable=False)
    direction = Column(String(8), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        # Один голос на пару (участник, элемент): повторный свайп перезаписывает направление
        UniqueConstraint("room_id", "user_id", "item_id", name="uq_swipe_room_user_item"),
        Index("idx_swipe_room_item", "room_id", "item_id"),
        Index("idx_swipe_room_user", "room_id", "user_id"),
    )

    @property
    def is_positive(self) -> bool:
        return self.direction in POSITIVE_DIRECTIONS

    def __repr__(self):
        return f"<Swipe user={self.user_id} item={self.item_id} {self.direction}>"
