# backend/tests/unit/test_permission_service.py
import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from legal_insights.models import UserPermission, UserRole
from legal_insights.services.access import check_notebook_access
from legal_insights.services.errors import NotFound, ValidationFailed
from legal_insights.services.permission_service import PermissionService

from factories import make_grant, make_notebook, make_tag, make_user


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def reader(db_session):
    return make_user(db_session, "reader@example.com")


@pytest.fixture
def tag(db_session, admin):
    return make_tag(db_session, "ClientA", admin.id)


def test_grant_creates_permission(db_session, admin, reader, tag):
    permission = PermissionService(db_session).grant(reader.id, tag.id, granted_by=admin.id)

    assert permission.user_id == reader.id
    assert permission.tag_id == tag.id
    assert permission.granted_by == admin.id
    assert permission.expires_at is None
    assert db_session.query(UserPermission).count() == 1


@pytest.mark.parametrize("offset", [timedelta(seconds=0), timedelta(hours=-1)])
def test_grant_rejects_expiry_not_in_future(db_session, admin, reader, tag, offset):
    now = datetime.now(timezone.utc)
    with pytest.raises(ValidationFailed):
        PermissionService(db_session).grant(reader.id, tag.id, admin.id, expires_at=now + offset, now=now)
    assert db_session.query(UserPermission).count() == 0


def test_grant_requires_existing_user_and_tag(db_session, admin, reader, tag):
    service = PermissionService(db_session)
    with pytest.raises(NotFound):
        service.grant(uuid4(), tag.id, admin.id)
    with pytest.raises(NotFound):
        service.grant(reader.id, uuid4(), admin.id)
    assert db_session.query(UserPermission).count() == 0


def test_regrant_replaces_expiry(db_session, admin, reader, tag):
    service = PermissionService(db_session)
    soon = datetime.now(timezone.utc) + timedelta(days=1)
    first = service.grant(reader.id, tag.id, admin.id, expires_at=soon)
    second = service.grant(reader.id, tag.id, admin.id, expires_at=None)

    assert second.id == first.id
    assert second.expires_at is None
    assert db_session.query(UserPermission).count() == 1


def test_revoke_twice_is_idempotent(db_session, admin, reader, tag):
    service = PermissionService(db_session)
    permission = service.grant(reader.id, tag.id, admin.id)
    permission_id = permission.id

    assert service.revoke(permission_id) is True
    assert service.revoke(permission_id) is False
    assert db_session.query(UserPermission).count() == 0


def test_revoke_for_user_and_tag(db_session, admin, reader, tag):
    service = PermissionService(db_session)
    service.grant(reader.id, tag.id, admin.id)

    assert service.revoke_for(reader.id, tag.id) is True
    assert service.revoke_for(reader.id, tag.id) is False


def test_purge_expired_leaves_access_unchanged(db_session, admin, reader, tag):
    now = datetime.now(timezone.utc)
    other_tag = make_tag(db_session, "ClientB", admin.id)
    notebook = make_notebook(db_session, admin, "Expired deal", tags=[tag])
    make_grant(db_session, reader, tag, expires_at=now - timedelta(minutes=5))
    make_grant(db_session, reader, other_tag)

    before = check_notebook_access(db_session, reader, notebook, now)
    deleted = PermissionService(db_session).purge_expired(now)
    after = check_notebook_access(db_session, reader, notebook, now)

    assert deleted == 1
    assert before is False
    assert after is False
    remaining = db_session.query(UserPermission).all()
    assert [p.tag_id for p in remaining] == [other_tag.id]


def test_is_active_tracks_expiry():
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    live = UserPermission(tag_id=uuid4(), expires_at=now + timedelta(seconds=1))
    lapsed = UserPermission(tag_id=uuid4(), expires_at=now - timedelta(seconds=1))
    assert PermissionService.is_active(live, now) is True
    assert PermissionService.is_active(lapsed, now) is False
