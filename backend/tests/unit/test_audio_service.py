# backend/tests/unit/test_audio_service.py
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from legal_insights.models import AudioStatus, UserRole
from legal_insights.services.audio_service import AudioOverviewService, url_needs_refresh
from legal_insights.services.errors import Conflict, ValidationFailed, WorkflowError
from legal_insights.services.storage_service import SignedUrl

from factories import make_notebook, make_user

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def notebook(db_session):
    admin = make_user(db_session, "admin@example.com", role=UserRole.ADMIN)
    return make_notebook(db_session, admin, "Board minutes")


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.audio_bucket = "audio"
    storage.get_signed_url.return_value = SignedUrl(
        url="https://storage.example.com/audio/overview.mp3?sig=1",
        expires_at=NOW + timedelta(hours=24),
    )
    return storage


@pytest.mark.parametrize(
    "expires_at, expected",
    [
        (None, True),
        (NOW - timedelta(minutes=1), True),
        (NOW + timedelta(minutes=4), True),
        (NOW + timedelta(minutes=30), False),
    ],
)
def test_url_needs_refresh(expires_at, expected):
    assert url_needs_refresh(expires_at, NOW) is expected


def test_mark_requested_rejects_duplicate(db_session, notebook):
    service = AudioOverviewService(db_session)
    service.mark_requested(notebook)
    assert notebook.audio_overview_generation_status == AudioStatus.GENERATING

    with pytest.raises(Conflict):
        service.mark_requested(notebook)


def test_run_generation_marks_failed_on_engine_error(db_session, notebook):
    workflow = MagicMock()
    workflow.trigger_audio_generation.side_effect = WorkflowError("Webhook responded with status: 500")
    service = AudioOverviewService(db_session)
    service.mark_requested(notebook)

    assert service.run_generation(notebook.id, workflow, "https://app/callback") is False
    db_session.refresh(notebook)
    assert notebook.audio_overview_generation_status == AudioStatus.FAILED


def test_complete_signs_url(db_session, notebook, storage):
    notebook = AudioOverviewService(db_session).complete(
        notebook.id, True, storage=storage, object_name=f"{notebook.id}/overview.mp3"
    )

    assert notebook.audio_overview_generation_status == AudioStatus.COMPLETED
    assert notebook.audio_overview_url == "https://storage.example.com/audio/overview.mp3?sig=1"
    storage.get_signed_url.assert_called_once_with("audio", f"{notebook.id}/overview.mp3")


def test_complete_requires_object_name(db_session, notebook, storage):
    with pytest.raises(ValidationFailed):
        AudioOverviewService(db_session).complete(notebook.id, True, storage=storage)


def test_refresh_skips_fresh_url(db_session, notebook, storage):
    service = AudioOverviewService(db_session)
    service.complete(notebook.id, True, storage=storage, object_name="overview.mp3")
    storage.get_signed_url.reset_mock()

    assert service.refresh_url(notebook, storage, now=NOW) is False
    assert service.refresh_url(notebook, storage, now=NOW + timedelta(hours=23, minutes=58)) is True
    storage.get_signed_url.assert_called_once()


def test_clear_removes_stored_audio(db_session, notebook, storage):
    service = AudioOverviewService(db_session)
    service.complete(notebook.id, True, storage=storage, object_name="overview.mp3")

    notebook = service.clear(notebook, storage)

    storage.delete_file.assert_called_once_with("audio", "overview.mp3")
    assert notebook.audio_overview_url is None
    assert notebook.audio_overview_generation_status is None
