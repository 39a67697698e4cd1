from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint

from app.db.session import Base
from app.db.timestamps import utcnow

class Follow(Base):
    __tablename__ = "follows"

    id = Column(String, primary_key=True, index=True)
    follower_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="unique_follow"),
        CheckConstraint("follower_id != following_id", name="no_self_follow"),
    )
