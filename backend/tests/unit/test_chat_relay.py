# backend/tests/unit/test_chat_relay.py
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from legal_insights.models import UserRole
from legal_insights.services.chat_service import ChatRelay, MessageState, OutgoingMessage
from legal_insights.services.errors import AccessDenied, ValidationFailed, WorkflowError
from legal_insights.services.workflow_client import WorkflowClient

from factories import make_grant, make_notebook, make_tag, make_user

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def workflow():
    client = MagicMock(spec=WorkflowClient)
    client.send_chat.return_value = {"output": "Clause 4 covers termination."}
    return client


@pytest.fixture
def setup(db_session):
    admin = make_user(db_session, "admin@example.com", role=UserRole.ADMIN)
    reader = make_user(db_session, "reader@example.com")
    tag = make_tag(db_session, "ClientA", admin.id)
    notebook = make_notebook(db_session, admin, "Master agreement", tags=[tag])
    return admin, reader, tag, notebook


class TestOutgoingMessage:

    def test_confirmed_path(self):
        message = OutgoingMessage("session", "hello")
        assert message.state == MessageState.IDLE
        message.submit()
        assert message.state == MessageState.PENDING
        message.confirm({"output": "hi"})
        assert message.state == MessageState.CONFIRMED
        assert message.response == {"output": "hi"}

    def test_failed_path(self):
        message = OutgoingMessage("session", "hello")
        message.submit()
        message.fail("timeout")
        assert message.state == MessageState.FAILED
        assert message.error == "timeout"

    def test_cannot_confirm_without_submit(self):
        with pytest.raises(ValueError):
            OutgoingMessage("session", "hello").confirm({})

    def test_cannot_resubmit_finished_message(self):
        message = OutgoingMessage("session", "hello")
        message.submit()
        message.confirm(None)
        with pytest.raises(ValueError):
            message.submit()


class TestChatRelay:

    def test_denied_sender_never_reaches_engine(self, db_session, workflow, setup):
        _, reader, _, notebook = setup
        relay = ChatRelay(db_session, workflow)

        with pytest.raises(AccessDenied) as exc:
            relay.send(reader, str(notebook.id), "What is the term?", reader.id, notebook.id, NOW)

        assert exc.value.code == "access_denied"
        workflow.send_chat.assert_not_called()

    def test_expired_grant_is_denied(self, db_session, workflow, setup):
        _, reader, tag, notebook = setup
        make_grant(db_session, reader, tag, expires_at=datetime(2026, 3, 1, 9, 29, 59, tzinfo=timezone.utc))

        with pytest.raises(AccessDenied):
            ChatRelay(db_session, workflow).send(reader, "s", "Hi", reader.id, notebook.id, NOW)
        workflow.send_chat.assert_not_called()

    def test_granted_sender_is_relayed_with_tag_filters(self, db_session, workflow, setup):
        _, reader, tag, notebook = setup
        make_grant(db_session, reader, tag)

        outgoing = ChatRelay(db_session, workflow).send(
            reader, str(notebook.id), "What is the term?", reader.id, notebook.id, NOW
        )

        assert outgoing.state == MessageState.CONFIRMED
        assert outgoing.response == {"output": "Clause 4 covers termination."}
        payload = workflow.send_chat.call_args.args[0]
        assert payload == {
            "session_id": str(notebook.id),
            "message": "What is the term?",
            "user_id": str(reader.id),
            "notebook_id": str(notebook.id),
            "tag_filters": [str(tag.id)],
            "timestamp": NOW.isoformat(),
        }

    def test_missing_notebook_is_denied(self, db_session, workflow, setup):
        _, reader, _, _ = setup
        with pytest.raises(AccessDenied):
            ChatRelay(db_session, workflow).send(reader, "s", "Hi", reader.id, uuid4(), NOW)

    def test_user_cannot_relay_for_someone_else(self, db_session, workflow, setup):
        admin, reader, _, notebook = setup
        with pytest.raises(AccessDenied):
            ChatRelay(db_session, workflow).send(reader, "s", "Hi", admin.id, notebook.id, NOW)
        workflow.send_chat.assert_not_called()

    def test_admin_may_relay_for_user_with_access(self, db_session, workflow, setup):
        admin, reader, tag, notebook = setup
        make_grant(db_session, reader, tag)

        outgoing = ChatRelay(db_session, workflow).send(admin, "s", "Hi", reader.id, notebook.id, NOW)
        assert outgoing.state == MessageState.CONFIRMED

    def test_blank_message_rejected(self, db_session, workflow, setup):
        admin, _, _, notebook = setup
        with pytest.raises(ValidationFailed):
            ChatRelay(db_session, workflow).send(admin, "s", "   ", admin.id, notebook.id, NOW)

    def test_engine_failure_propagates(self, db_session, workflow, setup):
        admin, _, _, notebook = setup
        workflow.send_chat.side_effect = WorkflowError("Webhook responded with status: 502")

        with pytest.raises(WorkflowError):
            ChatRelay(db_session, workflow).send(admin, "s", "Hi", admin.id, notebook.id, NOW)
