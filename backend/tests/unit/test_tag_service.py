# backend/tests/unit/test_tag_service.py
import pytest

from legal_insights.models import NotebookTag, SourceTag, Source, SourceType, TagCategory, UserPermission, UserRole
from legal_insights.services.errors import Conflict, NotFound, ValidationFailed
from legal_insights.services.tag_service import TagService

from factories import make_grant, make_notebook, make_tag, make_user


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin@example.com", role=UserRole.ADMIN)


def test_create_tag(db_session, admin):
    tag = TagService(db_session).create(" ClientA ", admin.id, category=TagCategory.CLIENT, color="#ff0000")

    assert tag.name == "ClientA"
    assert tag.category == TagCategory.CLIENT
    assert tag.color == "#ff0000"
    assert tag.created_by == admin.id


def test_create_uses_default_color(db_session, admin):
    assert TagService(db_session).create("Topic", admin.id).color == "#6b7280"


def test_duplicate_name_rejected_case_insensitively(db_session, admin):
    service = TagService(db_session)
    service.create("ClientA", admin.id)
    with pytest.raises(Conflict):
        service.create("clienta", admin.id)


def test_blank_name_rejected(db_session, admin):
    with pytest.raises(ValidationFailed):
        TagService(db_session).create("   ", admin.id)


def test_update_and_get(db_session, admin):
    service = TagService(db_session)
    tag = service.create("ClientA", admin.id)

    service.update(tag.id, name="Client A", description="Main client")
    fetched = service.get(tag.id)
    assert fetched.name == "Client A"
    assert fetched.description == "Main client"


def test_rename_changing_only_case(db_session, admin):
    service = TagService(db_session)
    tag = service.create("clienta", admin.id)

    assert service.update(tag.id, name="ClientA").name == "ClientA"


def test_rename_to_other_tags_name_rejected(db_session, admin):
    service = TagService(db_session)
    service.create("ClientA", admin.id)
    other = service.create("ClientB", admin.id)

    with pytest.raises(Conflict):
        service.update(other.id, name="CLIENTA")


def test_update_clears_description(db_session, admin):
    service = TagService(db_session)
    tag = service.create("ClientA", admin.id, description="Main client")

    service.update(tag.id, description=None)
    assert service.get(tag.id).description is None


def test_update_leaves_unset_fields(db_session, admin):
    service = TagService(db_session)
    tag = service.create("ClientA", admin.id, category=TagCategory.CLIENT, description="Main client")

    service.update(tag.id, color="#00ff00")
    fetched = service.get(tag.id)
    assert fetched.description == "Main client"
    assert fetched.category == TagCategory.CLIENT
    assert fetched.color == "#00ff00"


def test_list_tags_counts(db_session, admin):
    reader = make_user(db_session, "reader@example.com")
    tag = make_tag(db_session, "ClientA", admin.id)
    make_tag(db_session, "Unused", admin.id)
    make_notebook(db_session, admin, "One", tags=[tag])
    make_notebook(db_session, admin, "Two", tags=[tag])
    make_grant(db_session, reader, tag)

    counts = {t.name: (notebooks, grants) for t, notebooks, grants in TagService(db_session).list_tags()}
    assert counts == {"ClientA": (2, 1), "Unused": (0, 0)}


def test_delete_cascades_to_links_and_grants(db_session, admin):
    reader = make_user(db_session, "reader@example.com")
    tag = make_tag(db_session, "ClientA", admin.id)
    notebook = make_notebook(db_session, admin, "One", tags=[tag])
    source = Source(notebook_id=notebook.id, type=SourceType.TEXT, title="Memo", content="text")
    db_session.add(source)
    db_session.flush()
    db_session.add(SourceTag(source_id=source.id, tag_id=tag.id))
    db_session.commit()
    make_grant(db_session, reader, tag)

    service = TagService(db_session)
    assert service.delete(tag.id) is True
    assert service.delete(tag.id) is False

    assert db_session.query(NotebookTag).count() == 0
    assert db_session.query(SourceTag).count() == 0
    assert db_session.query(UserPermission).count() == 0
    with pytest.raises(NotFound):
        service.get(tag.id)
