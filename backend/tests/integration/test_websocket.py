# backend/tests/integration/test_websocket.py
import pytest
from fastapi import WebSocketDisconnect

from legal_insights.api.websocket import CLOSE_FORBIDDEN, CLOSE_UNAUTHORIZED
from legal_insights.models import Source, SourceType
from legal_insights.utils.security import create_access_token

from factories import make_grant, make_notebook, make_tag


def status_url(notebook_id, user):
    return f"/api/v1/ws/notebooks/{notebook_id}?token={create_access_token(user.id)}"


def test_status_snapshot(client, db_session, regular_user):
    notebook = make_notebook(db_session, regular_user, "Mine")
    db_session.add(Source(notebook_id=notebook.id, type=SourceType.TEXT, title="Memo", content="x"))
    db_session.commit()

    with client.websocket_connect(status_url(notebook.id, regular_user)) as websocket:
        snapshot = websocket.receive_json()
        websocket.send_text("close")

    assert snapshot["type"] == "status_update"
    assert snapshot["notebook_id"] == str(notebook.id)
    assert snapshot["generation_status"] == "pending"
    assert snapshot["sources"][0]["title"] == "Memo"
    assert snapshot["sources"][0]["processing_status"] == "pending"


def test_invalid_token_closes(client, db_session, regular_user):
    notebook = make_notebook(db_session, regular_user, "Mine")

    with client.websocket_connect(f"/api/v1/ws/notebooks/{notebook.id}?token=bogus") as websocket:
        with pytest.raises(WebSocketDisconnect) as exc:
            websocket.receive_json()
    assert exc.value.code == CLOSE_UNAUTHORIZED


def test_denied_user_closes(client, db_session, admin_user, regular_user):
    notebook = make_notebook(db_session, admin_user, "Private")

    with client.websocket_connect(status_url(notebook.id, regular_user)) as websocket:
        with pytest.raises(WebSocketDisconnect) as exc:
            websocket.receive_json()
    assert exc.value.code == CLOSE_FORBIDDEN


def test_revoked_grant_closes_open_socket(client, db_session, admin_user, regular_user):
    tag = make_tag(db_session, "ClientA", admin_user.id)
    notebook = make_notebook(db_session, admin_user, "Shared", tags=[tag])
    grant = make_grant(db_session, regular_user, tag)

    with client.websocket_connect(status_url(notebook.id, regular_user)) as websocket:
        websocket.receive_json()
        db_session.delete(grant)
        db_session.commit()
        websocket.send_text("refresh")
        with pytest.raises(WebSocketDisconnect) as exc:
            websocket.receive_json()
    assert exc.value.code == CLOSE_FORBIDDEN
