"""Audio overview generation via the workflow engine."""
import dramatiq
import logging
from uuid import UUID

from legal_insights.database import get_session_local
from legal_insights.services.audio_service import AudioOverviewService
from legal_insights.services.workflow_client import get_workflow_client

logger = logging.getLogger(__name__)


# Upstream failures are not retried; the notebook is marked failed instead
@dramatiq.actor(max_retries=0, time_limit=5 * 60 * 1000)
def generate_audio_overview_task(notebook_id: str, callback_url: str):
    logger.info(f"Requesting audio overview for notebook {notebook_id}")

    db = get_session_local()()
    try:
        AudioOverviewService(db).run_generation(UUID(notebook_id), get_workflow_client(), callback_url)
    finally:
        db.close()
