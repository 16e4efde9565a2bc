# backend/tests/integration/test_chat.py
import httpx
import pytest

from legal_insights.main import app
from legal_insights.models import ChatMessage
from legal_insights.services.workflow_client import WorkflowClient, get_workflow_client

from factories import make_grant, make_notebook, make_tag

RELAY_URL = "/api/v1/send-chat-message"


@pytest.fixture
def private_notebook(db_session, admin_user):
    tag = make_tag(db_session, "ClientA", admin_user.id)
    notebook = make_notebook(db_session, admin_user, "Deal room", tags=[tag])
    return notebook, tag


def chat_body(user, notebook, message="What is the renewal term?"):
    return {
        "session_id": str(notebook.id),
        "message": message,
        "user_id": str(user.id),
        "notebook_id": str(notebook.id),
    }


def test_relay_denied_without_grant(client, regular_user, user_headers, private_notebook, mock_workflow):
    notebook, _ = private_notebook

    response = client.post(RELAY_URL, json=chat_body(regular_user, notebook), headers=user_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Access denied to this notebook"}
    assert response.headers["access-control-allow-origin"] == "*"
    mock_workflow.send_chat.assert_not_called()


def test_relay_forwards_for_granted_user(client, db_session, regular_user, user_headers, private_notebook, mock_workflow):
    notebook, tag = private_notebook
    make_grant(db_session, regular_user, tag)

    response = client.post(RELAY_URL, json=chat_body(regular_user, notebook), headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"output": "The contract renews annually."}}
    assert response.headers["access-control-allow-origin"] == "*"
    payload = mock_workflow.send_chat.call_args.args[0]
    assert payload["tag_filters"] == [str(tag.id)]
    assert payload["user_id"] == str(regular_user.id)


def test_relay_rejects_impersonation(client, admin_user, regular_user, user_headers, private_notebook, mock_workflow):
    notebook, _ = private_notebook

    response = client.post(RELAY_URL, json=chat_body(admin_user, notebook), headers=user_headers)

    assert response.status_code == 403
    mock_workflow.send_chat.assert_not_called()


def test_relay_missing_configuration(client, admin_user, admin_headers, private_notebook):
    notebook, _ = private_notebook
    app.dependency_overrides[get_workflow_client] = lambda: WorkflowClient(None, None, None)

    response = client.post(RELAY_URL, json=chat_body(admin_user, notebook), headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Notebook chat webhook URL is not configured"}


def test_relay_surfaces_engine_status(client, admin_user, admin_headers, private_notebook):
    notebook, _ = private_notebook
    engine = WorkflowClient(
        "https://engine.example.com/chat",
        None,
        "s3cret",
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
    )
    app.dependency_overrides[get_workflow_client] = lambda: engine

    response = client.post(RELAY_URL, json=chat_body(admin_user, notebook), headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Webhook responded with status: 502"}


def test_relay_preflight(client):
    response = client.options(
        RELAY_URL,
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "authorization" in response.headers["access-control-allow-headers"]


def test_relay_unauthenticated_still_has_cors(client, regular_user, private_notebook):
    notebook, _ = private_notebook

    response = client.post(RELAY_URL, json=chat_body(regular_user, notebook))

    assert response.status_code in (401, 403)
    assert response.headers["access-control-allow-origin"] == "*"


def test_chat_history_list_and_clear(client, db_session, regular_user, user_headers):
    notebook = make_notebook(db_session, regular_user, "Mine")
    db_session.add_all([
        ChatMessage(session_id=str(notebook.id), message={"type": "human", "content": "Hi"}),
        ChatMessage(session_id=str(notebook.id), message={"type": "ai", "content": "Hello"}),
        ChatMessage(session_id="another-session", message={"type": "human", "content": "Elsewhere"}),
    ])
    db_session.commit()

    history = client.get(f"/api/v1/notebooks/{notebook.id}/chat", headers=user_headers)
    cleared = client.delete(f"/api/v1/notebooks/{notebook.id}/chat", headers=user_headers)

    assert [m["message"]["type"] for m in history.json()] == ["human", "ai"]
    assert cleared.status_code == 204
    assert db_session.query(ChatMessage).count() == 1


def test_chat_history_denied(client, db_session, admin_user, user_headers):
    notebook = make_notebook(db_session, admin_user, "Private")
    assert client.get(f"/api/v1/notebooks/{notebook.id}/chat", headers=user_headers).status_code == 403
