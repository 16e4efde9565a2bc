# backend/tests/unit/test_promote_admin.py
import pytest
from datetime import datetime, timedelta, timezone

from legal_insights.models import UserPermission, UserRole
from legal_insights.services.errors import NotFound, ValidationFailed
from scripts import promote_admin

from factories import make_grant, make_tag, make_user


@pytest.fixture
def session_factory(db_session, monkeypatch):
    monkeypatch.setattr(promote_admin, "get_session_local", lambda: lambda: db_session)


def test_promote_by_email_ignores_case(db_session):
    user = make_user(db_session, "alice@firm.example")

    promote_admin.promote(db_session, " Alice@Firm.example ")

    db_session.refresh(user)
    assert user.role == UserRole.ADMIN


def test_promote_unknown_email(db_session):
    with pytest.raises(NotFound):
        promote_admin.promote(db_session, "nobody@firm.example")


def test_grant_tags_with_expiry(db_session):
    admin = make_user(db_session, "admin@firm.example", role=UserRole.ADMIN)
    user = make_user(db_session, "bob@firm.example")
    make_tag(db_session, "ClientA", admin.id)
    make_tag(db_session, "Litigation", admin.id)

    grants = promote_admin.grant_tags(db_session, "bob@firm.example", ["clienta", "Litigation"], days=30)

    assert len(grants) == 2
    assert {g.user_id for g in grants} == {user.id}
    soon = datetime.now(timezone.utc) + timedelta(days=31)
    assert all(g.expires_at.replace(tzinfo=timezone.utc) < soon for g in grants)


def test_grant_tags_writes_nothing_when_a_tag_is_missing(db_session):
    admin = make_user(db_session, "admin@firm.example", role=UserRole.ADMIN)
    make_user(db_session, "bob@firm.example")
    make_tag(db_session, "ClientA", admin.id)

    with pytest.raises(NotFound):
        promote_admin.grant_tags(db_session, "bob@firm.example", ["ClientA", "Unknown"])
    assert db_session.query(UserPermission).count() == 0


def test_grant_tags_refuses_admins(db_session):
    admin = make_user(db_session, "admin@firm.example", role=UserRole.ADMIN)
    make_tag(db_session, "ClientA", admin.id)

    with pytest.raises(ValidationFailed):
        promote_admin.grant_tags(db_session, "admin@firm.example", ["ClientA"])


def test_describe_access_skips_expired_grants(db_session):
    admin = make_user(db_session, "admin@firm.example", role=UserRole.ADMIN)
    user = make_user(db_session, "bob@firm.example")
    make_user(db_session, "carol@firm.example", is_active=False)
    live = make_tag(db_session, "ClientA", admin.id)
    stale = make_tag(db_session, "ClientB", admin.id)
    make_grant(db_session, user, live)
    make_grant(db_session, user, stale, expires_at=datetime.now(timezone.utc) - timedelta(days=1))

    assert promote_admin.describe_access(db_session) == [
        "admin@firm.example [admin]: all notebooks",
        "bob@firm.example [user]: ClientA",
        "carol@firm.example [user] (inactive): own and public notebooks",
    ]


def test_main_promotes_and_lists(db_session, session_factory, capsys):
    make_user(db_session, "alice@firm.example")

    assert promote_admin.main(["alice@firm.example", "--list"]) == 0
    assert capsys.readouterr().out == "alice@firm.example [admin]: all notebooks\n"


def test_main_reports_failure(db_session, session_factory):
    assert promote_admin.main(["nobody@firm.example"]) == 1


def test_main_requires_email_or_list():
    with pytest.raises(SystemExit):
        promote_admin.main([])
