"""
Cleanup tasks for tinylink.

Expired links are normally reclaimed the first time someone tries to
resolve them. This script can be scheduled to run periodically to remove
the ones nobody visits any more.

Usage:
    python -m tinylink.scripts.cleanup_tasks
"""

from tinylink.core.config import logger
from tinylink.db.session import SessionLocal, init_db
from tinylink.services.admin_service import cleanup_expired


def run_cleanup() -> int:
    """Run all cleanup tasks."""
    init_db()
    db = SessionLocal()

    try:
        expired_count = cleanup_expired(db)
        logger.info(f"Cleaned up {expired_count} expired URLs")
        return expired_count
    finally:
        db.close()


if __name__ == "__main__":
    run_cleanup()
