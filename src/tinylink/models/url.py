from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime, UTC
from tinylink.db.base import Base


class URL(Base):
    __tablename__ = "urls"

    short_code = Column(String, primary_key=True, index=True)
    original_url = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    expires_at = Column(DateTime(timezone=True), nullable=True)
    visits = Column(Integer, nullable=False, default=0, server_default="0")
