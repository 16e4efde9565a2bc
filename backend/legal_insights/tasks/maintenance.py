import dramatiq
import logging

from legal_insights.database import get_session_local
from legal_insights.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


@dramatiq.actor(max_retries=3, min_backoff=1000)
def purge_expired_permissions_task():
    """Delete expired grants. Access checks already ignore them."""
    db = get_session_local()()
    try:
        deleted = PermissionService(db).purge_expired()
        logger.info(f"Expired permission sweep removed {deleted} rows")
    finally:
        db.close()
