from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, UniqueConstraint

from .base import Base, utcnow


class Match(Base):
    __tablename__ = "room_matches"

    id = Column(BigInteger, primary_key=True)
    room_id = Column(BigInteger, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(BigInteger, nullable=False)
    matched_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("room_id", "item_id", name="uq_match_room_item"),
    )

    def __repr__(self):
        return f"<Match room={self.room_id} item={self.item_id}>"
