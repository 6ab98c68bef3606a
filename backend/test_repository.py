"""Diagram store: ordering, failure wrapping and corrupted documents"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import make_cart_diagram
from stateflow.db.models import Base, DiagramRecord
from stateflow.db.repository import DiagramRepository
from stateflow.ir import PersistenceError


def make_session(with_tables: bool = True):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if with_tables:
        Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()


@pytest.fixture
def repository():
    db = make_session()
    yield DiagramRepository(db)
    db.close()


def stamped(diagram_id: str, day: int):
    diagram = make_cart_diagram()
    diagram.id = diagram_id
    diagram.updated_at = datetime(2024, 1, day, tzinfo=timezone.utc)
    return diagram


def test_save_get_delete(repository):
    diagram = make_cart_diagram()
    repository.save(diagram)
    assert repository.get("d1") == diagram

    diagram.name = "Renamed"
    repository.save(diagram)
    assert repository.get("d1").name == "Renamed"
    assert len(repository.list_all()) == 1

    assert repository.delete("d1") is True
    assert repository.get("d1") is None
    assert repository.delete("d1") is False


def test_list_all_newest_first(repository):
    repository.save(stamped("old", 1))
    repository.save(stamped("new", 20))
    repository.save(stamped("mid", 10))
    assert [d.id for d in repository.list_all()] == ["new", "mid", "old"]


def test_store_failures_become_persistence_errors():
    db = make_session(with_tables=False)
    repository = DiagramRepository(db)

    with pytest.raises(PersistenceError):
        repository.save(make_cart_diagram())
    # the failed transaction was rolled back
    assert not db.in_transaction()

    with pytest.raises(PersistenceError):
        repository.list_all()
    with pytest.raises(PersistenceError):
        repository.get("d1")
    with pytest.raises(PersistenceError):
        repository.delete("d1")
    db.close()


@pytest.mark.parametrize("document", ["{not json", '{"id": "bad"}'])
def test_corrupted_document_is_reported(repository, document):
    repository.db.add(DiagramRecord(
        id="bad",
        name="Bad",
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
        document=document,
    ))
    repository.db.commit()

    with pytest.raises(PersistenceError, match="corrupted"):
        repository.get("bad")
    with pytest.raises(PersistenceError, match="corrupted"):
        repository.list_all()
