from fastapi import APIRouter

from legal_insights.api.deps import AdminUser, DBSession
from legal_insights.schemas.stats import AdminStats
from legal_insights.services.stats_service import collect_stats

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=AdminStats)
def get_admin_stats(db: DBSession, current_user: AdminUser):
    """Row counts for the admin console."""
    return collect_stats(db)
