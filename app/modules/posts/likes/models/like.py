from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from app.db.session import Base
from app.db.timestamps import utcnow

class Like(Base):
    __tablename__ = "likes"

    id = Column(String, primary_key=True, index=True)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="unique_like"),
    )
