from roadboard.extensions import db
from roadboard.models import AuditLog, RoadmapItem
from roadboard.services.tags import DEFAULT_TAGS


def test_board_crud(app, client):
    resp = client.post("/api/boards", json={"name": "Mobile", "sortOrder": 2})
    assert resp.status_code == 201
    board = resp.get_json()["board"]
    assert board["description"] == ""

    resp = client.patch(f"/api/boards/{board['id']}", json={"description": "iOS + Android"})
    assert resp.get_json()["board"]["name"] == "Mobile"
    assert resp.get_json()["board"]["description"] == "iOS + Android"

    names = [b["name"] for b in client.get("/api/boards").get_json()["boards"]]
    assert names == ["Mobile"]

    assert client.delete(f"/api/boards/{board['id']}").status_code == 204
    assert client.get(f"/api/boards/{board['id']}").status_code == 404

    with app.app_context():
        actions = [r.action for r in db.session.query(AuditLog).filter_by(entity="Board").order_by(AuditLog.id)]
        assert actions == ["CREATE", "UPDATE", "DELETE"]


def test_board_name_not_unique(client):
    assert client.post("/api/boards", json={"name": "Dup"}).status_code == 201
    assert client.post("/api/boards", json={"name": "Dup"}).status_code == 201


def test_board_validation(client):
    resp = client.post("/api/boards", json={"name": "x" * 81})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "name"
    assert client.patch("/api/boards/nope", json={"name": "x"}).status_code == 404


def test_delete_board_removes_its_items(app, client):
    board = client.post("/api/boards", json={"name": "Web"}).get_json()["board"]
    client.post("/api/items", json={"title": "SSO", "boardId": board["id"]})
    client.delete(f"/api/boards/{board['id']}")
    with app.app_context():
        assert db.session.query(RoadmapItem).count() == 0


def test_tags_endpoint_seeds_defaults_sorted(client):
    tags = client.get("/api/tags").get_json()["tags"]
    names = [t["name"] for t in tags]
    assert set(DEFAULT_TAGS) <= set(names)
    assert names == sorted(names)

    # second call does not duplicate
    again = client.get("/api/tags").get_json()["tags"]
    assert len(again) == len(tags)


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"
