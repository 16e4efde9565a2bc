# backend/legal_insights/services/audio_service.py
"""Audio overview lifecycle: request, workflow callback, signed URL refresh."""
import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_insights.models.notebook import AudioStatus, Notebook
from legal_insights.services.access import as_utc, utcnow
from legal_insights.services.errors import Conflict, NotFound, ServiceError, ValidationFailed
from legal_insights.services.storage_service import StorageService
from legal_insights.services.workflow_client import WorkflowClient

logger = logging.getLogger(__name__)

# Refresh a little before the signed URL actually stops working
REFRESH_MARGIN = timedelta(minutes=5)


def url_needs_refresh(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expires_at is None:
        return True
    if now is None:
        now = utcnow()
    return as_utc(expires_at) <= as_utc(now) + REFRESH_MARGIN


class AudioOverviewService:
    def __init__(self, db: Session):
        self.db = db

    def mark_requested(self, notebook: Notebook) -> Notebook:
        if notebook.audio_overview_generation_status == AudioStatus.GENERATING:
            raise Conflict("Audio overview generation is already in progress")
        notebook.audio_overview_generation_status = AudioStatus.GENERATING
        self.db.commit()
        self.db.refresh(notebook)
        return notebook

    def run_generation(self, notebook_id: UUID, workflow: WorkflowClient, callback_url: str) -> bool:
        """Ask the workflow engine to synthesize audio. Marks the notebook failed on error."""
        notebook = self.db.get(Notebook, notebook_id)
        if notebook is None:
            logger.error(f"Notebook {notebook_id} not found for audio generation")
            return False
        try:
            workflow.trigger_audio_generation(str(notebook_id), callback_url)
        except ServiceError as e:
            logger.error(f"Audio generation for notebook {notebook_id} failed: {e}")
            notebook.audio_overview_generation_status = AudioStatus.FAILED
            self.db.commit()
            return False
        logger.info(f"Audio generation started for notebook {notebook_id}")
        return True

    def complete(
        self,
        notebook_id: UUID,
        success: bool,
        storage: Optional[StorageService] = None,
        object_name: Optional[str] = None,
    ) -> Notebook:
        """Record the workflow engine's result for an audio overview."""
        notebook = self.db.get(Notebook, notebook_id)
        if notebook is None:
            raise NotFound("Notebook not found")

        if not success:
            notebook.audio_overview_generation_status = AudioStatus.FAILED
            self.db.commit()
            self.db.refresh(notebook)
            return notebook

        if not object_name:
            raise ValidationFailed("object_name is required for a completed audio overview")
        notebook.audio_object_name = object_name
        self._sign(notebook, storage)
        notebook.audio_overview_generation_status = AudioStatus.COMPLETED
        self.db.commit()
        self.db.refresh(notebook)
        return notebook

    def refresh_url(
        self,
        notebook: Notebook,
        storage: StorageService,
        force: bool = False,
        now: Optional[datetime] = None,
    ) -> bool:
        """Re-sign the audio URL if it is expired or close to it. Returns True if refreshed."""
        if not notebook.audio_object_name:
            return False
        if not force and not url_needs_refresh(notebook.audio_url_expires_at, now):
            return False
        self._sign(notebook, storage)
        self.db.commit()
        self.db.refresh(notebook)
        logger.info(f"Refreshed audio URL for notebook {notebook.id}")
        return True

    def clear(self, notebook: Notebook, storage: StorageService) -> Notebook:
        if notebook.audio_object_name:
            storage.delete_file(storage.audio_bucket, notebook.audio_object_name)
        notebook.audio_object_name = None
        notebook.audio_overview_url = None
        notebook.audio_url_expires_at = None
        notebook.audio_overview_generation_status = None
        self.db.commit()
        self.db.refresh(notebook)
        return notebook

    def _sign(self, notebook: Notebook, storage: StorageService) -> None:
        signed = storage.get_signed_url(storage.audio_bucket, notebook.audio_object_name)
        notebook.audio_overview_url = signed.url
        notebook.audio_url_expires_at = signed.expires_at
