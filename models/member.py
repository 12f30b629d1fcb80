from sqlalchemy import Column, BigInteger, Boolean, DateTime, ForeignKey, String, UniqueConstraint

from .base import Base, utcnow


class Member(Base):
    __tablename__ = "room_members"

    id = Column(BigInteger, primary_key=True)
    room_id = Column(BigInteger, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String(128), nullable=False)
    name = Column(String(64), nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    finished = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("room_id", "session_id", name="uq_member_room_session"),
    )

    def __repr__(self):
        return f"<Member id={self.id} room={self.room_id} name={self.name}>"
