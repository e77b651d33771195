from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from typing import Generator
from tinylink.core.config import settings, logger
from tinylink.db.base import Base

# SQLite connections are shared with FastAPI's threadpool
connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the tables if they do not exist yet."""
    # Models register themselves on Base.metadata at import time
    from tinylink.models import url  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
