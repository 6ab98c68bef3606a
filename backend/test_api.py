"""HTTP surface over an in-memory SQLite store"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import make_cart_diagram
from stateflow.api.routes import get_repository
from stateflow.api.serializers import diagram_to_record
from stateflow.db.repository import DiagramRepository
from stateflow.db.models import Base
from stateflow.db.session import engine
from stateflow.main import app


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client


def create(client, name="Cart"):
    response = client.post("/diagrams", json={"name": name})
    assert response.status_code == 201
    return response.json()


def test_create_list_get_delete(client):
    created = create(client)
    assert created["name"] == "Cart"
    assert created["actors"] == []

    listing = client.get("/diagrams").json()
    assert [d["id"] for d in listing] == [created["id"]]

    assert client.get(f"/diagrams/{created['id']}").json()["id"] == created["id"]
    assert client.delete(f"/diagrams/{created['id']}").status_code == 204
    assert client.get(f"/diagrams/{created['id']}").status_code == 404
    assert client.delete(f"/diagrams/{created['id']}").status_code == 404


def test_import_layout_and_export(client):
    diagram_id = create(client)["id"]
    document = diagram_to_record(make_cart_diagram())

    imported = client.put(f"/diagrams/{diagram_id}/import", json=document)
    assert imported.status_code == 200
    assert imported.json()["id"] == diagram_id

    layout = client.get(f"/diagrams/{diagram_id}/layout").json()
    assert [e["label"] for e in layout["edges"]] == ["dispatch", "update (cartItems)"]
    assert layout["validation"]["is_valid"] is True

    exported = client.get(f"/diagrams/{diagram_id}/export")
    assert exported.headers["content-type"].startswith("application/json")
    assert [a["id"] for a in exported.json()["actors"]] == ["A", "B"]


def test_bad_import_is_rejected_and_diagram_kept(client):
    diagram_id = create(client, "Keep me")["id"]
    response = client.put(f"/diagrams/{diagram_id}/import", json={"name": "no id"})
    assert response.status_code == 422
    assert "id" in response.json()["detail"]
    assert client.get(f"/diagrams/{diagram_id}").json()["name"] == "Keep me"


def test_entity_routes(client):
    diagram_id = create(client)["id"]

    added = client.post(
        f"/diagrams/{diagram_id}/actors",
        json={"id": "a", "name": "View", "type": "component"},
    )
    assert added.status_code == 201
    assert client.post(
        f"/diagrams/{diagram_id}/actors",
        json={"id": "a", "name": "Again", "type": "component"},
    ).status_code == 409
    assert client.post(
        f"/diagrams/{diagram_id}/actors",
        json={"id": "b", "name": "Bad", "type": "robot"},
    ).status_code == 422

    patched = client.patch(
        f"/diagrams/{diagram_id}/actors/a",
        json={"updates": {"type": "store", "scope": "global"}},
    )
    assert patched.status_code == 200
    assert patched.json()["scope"] == "global"

    layout = client.get(f"/diagrams/{diagram_id}/layout").json()
    assert layout["nodes"][0]["color"] == "#22c55e"

    assert client.delete(f"/diagrams/{diagram_id}/actors/a").status_code == 204
    assert client.delete(f"/diagrams/{diagram_id}/actors/a").status_code == 404
    assert client.post(f"/diagrams/{diagram_id}/widgets", json={}).status_code == 422


def test_focus_and_svg(client):
    diagram_id = create(client)["id"]
    client.put(f"/diagrams/{diagram_id}/import", json=diagram_to_record(make_cart_diagram()))

    focus = client.post(f"/diagrams/{diagram_id}/focus/f1").json()
    assert focus["node_id"] == "trigger-f1"
    missing = client.post(f"/diagrams/{diagram_id}/focus/nope").json()
    assert missing["node_id"] is None

    svg = client.get(f"/diagrams/{diagram_id}/svg")
    assert svg.headers["content-type"].startswith("image/svg+xml")
    assert "CartStore" in svg.text


def test_stateless_layout(client):
    response = client.post("/layout", json=diagram_to_record(make_cart_diagram()))
    assert response.status_code == 200
    body = response.json()
    assert [n["x"] for n in body["nodes"][:2]] == [0, 200]
    assert client.post("/layout", json={"id": "x"}).status_code == 422


def test_unavailable_store_answers_503(client):
    broken = sessionmaker(bind=create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))()
    app.dependency_overrides[get_repository] = lambda: DiagramRepository(broken)
    try:
        assert client.get("/diagrams").status_code == 503
        assert client.post("/diagrams", json={"name": "Lost"}).status_code == 503
        assert client.get("/diagrams/d1").status_code == 503
    finally:
        app.dependency_overrides.clear()
        broken.close()
