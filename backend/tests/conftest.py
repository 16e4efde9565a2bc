# backend/tests/conftest.py
import os

# Keep dramatiq messages in memory; must be set before the app is imported
os.environ.setdefault("LEGAL_INSIGHTS_TASK_BROKER", "stub")

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from legal_insights.main import app
from legal_insights.database import get_db
from legal_insights.models import Base, UserRole
from legal_insights.services.storage_service import SignedUrl, get_reachable_storage, get_storage_service
from legal_insights.services.workflow_client import WorkflowClient, get_workflow_client

from factories import auth_headers, make_user


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_storage():
    """Mock MinIO storage for integration tests."""
    storage = MagicMock()
    storage.sources_bucket = "sources"
    storage.audio_bucket = "audio"
    storage.upload_file.return_value = 1024
    storage.is_available.return_value = True
    storage.get_signed_url.side_effect = lambda bucket, name, lifetime=None: SignedUrl(
        url=f"https://storage.example.com/{bucket}/{name}?sig=abc",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )
    return storage


@pytest.fixture
def mock_workflow():
    """Workflow engine stand-in that answers every chat message."""
    workflow = MagicMock(spec=WorkflowClient)
    workflow.send_chat.return_value = {"output": "The contract renews annually."}
    return workflow


@pytest.fixture
def client(db_session, mock_storage, mock_workflow):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: mock_storage
    app.dependency_overrides[get_reachable_storage] = lambda: mock_storage
    app.dependency_overrides[get_workflow_client] = lambda: mock_workflow

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def regular_user(db_session):
    return make_user(db_session, "user@example.com")


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "other@example.com")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def user_headers(regular_user):
    return auth_headers(regular_user)
