# backend/legal_insights/services/workflow_client.py
"""HTTP client for the external workflow engine (chat completion, audio synthesis)."""
import logging
from typing import Any, Dict, Optional

import httpx

from legal_insights.config import get_settings
from legal_insights.services.errors import WorkflowConfigError, WorkflowError

logger = logging.getLogger(__name__)


class WorkflowClient:
    def __init__(
        self,
        chat_url: Optional[str],
        audio_url: Optional[str],
        auth_secret: Optional[str],
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.chat_url = chat_url
        self.audio_url = audio_url
        self.auth_secret = auth_secret
        self.timeout = timeout
        self.transport = transport

    def send_chat(self, payload: Dict[str, Any]) -> Any:
        if not self.chat_url:
            raise WorkflowConfigError("Notebook chat webhook URL is not configured")
        return self._post(self.chat_url, payload)

    def trigger_audio_generation(self, notebook_id: str, callback_url: str) -> Any:
        if not self.audio_url:
            raise WorkflowConfigError("Audio generation webhook URL is not configured")
        return self._post(self.audio_url, {"notebook_id": notebook_id, "callback_url": callback_url})

    def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        if not self.auth_secret:
            raise WorkflowConfigError("Workflow auth secret is not configured")

        headers = {"Authorization": self.auth_secret}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Workflow request to {url} failed: {e}")
            raise WorkflowError("Failed to reach workflow engine") from e

        if response.is_error:
            logger.error(f"Webhook responded with status: {response.status_code}: {response.text}")
            raise WorkflowError(f"Webhook responded with status: {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return response.text


def get_workflow_client() -> WorkflowClient:
    settings = get_settings()
    return WorkflowClient(
        chat_url=settings.notebook_chat_url,
        audio_url=settings.audio_generation_url,
        auth_secret=settings.workflow_auth,
        timeout=settings.workflow_timeout_seconds,
    )
