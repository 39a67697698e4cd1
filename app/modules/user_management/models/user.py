from sqlalchemy import Column, String, DateTime

from app.db.session import Base
from app.db.timestamps import utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    external_id = Column(String, unique=True, index=True, nullable=False)  # identity provider uid
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
