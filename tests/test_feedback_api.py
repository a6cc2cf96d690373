import json

from roadboard.extensions import db
from roadboard.models import AuditLog, FeedbackImage, UserFeedback


def _create(client, **body):
    resp = client.post("/api/feedback", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["item"]


def test_feedback_create_defaults(client):
    fb = _create(client, content="Search is slow")
    assert fb["kind"] == "FEEDBACK"
    assert fb["device"] == "-"
    assert fb["feedbackType"] == "REQUEST"
    assert fb["source"] == ""
    assert fb["language"] == ""
    assert fb["sortOrder"] == 0


def test_praise_create_defaults_and_images(client):
    fb = _create(client, kind="PRAISE", device="IOS", feedbackType="BUG", images=["/uploads/feedback/a.png"])
    assert fb["device"] == "-"
    assert fb["feedbackType"] == ""
    assert fb["source"] == "EMAIL"
    assert fb["language"] == "ZH_CN"
    assert [i["url"] for i in fb["images"]] == ["/uploads/feedback/a.png"]


def test_images_ignored_for_feedback_kind(client):
    fb = _create(client, content="x", images=["/uploads/feedback/a.png"])
    assert fb["images"] == []


def test_sort_order_is_max_plus_one_per_kind(client):
    assert _create(client, content="a")["sortOrder"] == 0
    assert _create(client, content="b")["sortOrder"] == 1
    assert _create(client, kind="PRAISE", content="c")["sortOrder"] == 0


def test_empty_feedback_rejected(client):
    resp = client.post("/api/feedback", json={"userName": " ", "content": ""})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "content"


def test_switch_to_praise_clears_feedback_type(client):
    fb = _create(client, content="x", feedbackType="BUG")
    updated = client.patch(f"/api/feedback/{fb['id']}", json={"kind": "PRAISE"}).get_json()["item"]
    assert updated["kind"] == "PRAISE"
    assert updated["feedbackType"] == ""
    assert updated["content"] == "x"


def test_switch_to_praise_keeps_explicit_feedback_type(client):
    fb = _create(client, content="x")
    updated = client.patch(
        f"/api/feedback/{fb['id']}", json={"kind": "PRAISE", "feedbackType": "SUGGESTION"}
    ).get_json()["item"]
    assert updated["feedbackType"] == "SUGGESTION"


def test_switch_to_feedback_clears_source_and_language(client):
    fb = _create(client, kind="PRAISE", content="love it", source="STORE", language="EN")
    updated = client.patch(f"/api/feedback/{fb['id']}", json={"kind": "FEEDBACK"}).get_json()["item"]
    assert updated["source"] == ""
    assert updated["language"] == ""


def test_patch_null_enums_reset(client):
    fb = _create(client, content="x", device="MAC")
    updated = client.patch(f"/api/feedback/{fb['id']}", json={"device": None, "feedbackType": None}).get_json()["item"]
    assert updated["device"] == "-"
    assert updated["feedbackType"] == ""


def test_patch_without_kind_leaves_coupled_fields(client):
    fb = _create(client, kind="PRAISE", content="x", source="SOCIAL")
    updated = client.patch(f"/api/feedback/{fb['id']}", json={"content": "y"}).get_json()["item"]
    assert updated["source"] == "SOCIAL"
    assert updated["language"] == "ZH_CN"


def test_patch_images_replaces_all(app, client):
    fb = _create(client, kind="PRAISE", images=["/uploads/feedback/a.png", "/uploads/feedback/b.png"])
    updated = client.patch(f"/api/feedback/{fb['id']}", json={"images": ["/uploads/feedback/c.png"]}).get_json()["item"]
    assert [i["url"] for i in updated["images"]] == ["/uploads/feedback/c.png"]
    with app.app_context():
        assert db.session.query(FeedbackImage).count() == 1


def test_list_kind_and_search(client):
    _create(client, userName="alice", content="search crashes")
    _create(client, email="bob@example.com", content="slow sync")
    _create(client, kind="PRAISE", content="search is great")

    assert len(client.get("/api/feedback").get_json()["items"]) == 2
    assert len(client.get("/api/feedback?kind=bogus").get_json()["items"]) == 2
    praise = client.get("/api/feedback?kind=PRAISE").get_json()["items"]
    assert [p["content"] for p in praise] == ["search is great"]

    hits = client.get("/api/feedback?q=search").get_json()["items"]
    assert [h["userName"] for h in hits] == ["alice"]
    hits = client.get("/api/feedback?q=bob@").get_json()["items"]
    assert [h["content"] for h in hits] == ["slow sync"]


def test_todo_toggle(client):
    fb = _create(client, todo=[{"text": "reply", "done": False}, {"text": "fix", "done": False}])
    resp = client.patch(f"/api/feedback/{fb['id']}/todos/1", json={})
    assert resp.status_code == 200
    todos = json.loads(resp.get_json()["item"]["todo"])
    assert todos == [{"text": "reply", "done": False}, {"text": "fix", "done": True}]

    resp = client.patch(f"/api/feedback/{fb['id']}/todos/1", json={"done": True})
    assert json.loads(resp.get_json()["item"]["todo"])[1]["done"] is True

    assert client.patch(f"/api/feedback/{fb['id']}/todos/5", json={}).status_code == 400
    assert client.patch("/api/feedback/nope/todos/0", json={}).status_code == 404


def test_open_todos_filter(client):
    _create(client, content="a", todo=[{"text": "open", "done": False}])
    _create(client, content="b", todo=[{"text": "closed", "done": True}])
    _create(client, content="c")
    rows = client.get("/api/feedback?openTodos=1").get_json()["items"]
    assert [r["content"] for r in rows] == ["a"]


def test_delete_feedback(app, client):
    fb = _create(client, kind="PRAISE", images=["/uploads/feedback/a.png"])
    assert client.delete(f"/api/feedback/{fb['id']}").status_code == 204
    assert client.get(f"/api/feedback/{fb['id']}").status_code == 404
    assert client.delete(f"/api/feedback/{fb['id']}").status_code == 404
    with app.app_context():
        assert db.session.query(UserFeedback).count() == 0
        assert db.session.query(FeedbackImage).count() == 0
        actions = [r.action for r in db.session.query(AuditLog).order_by(AuditLog.id)]
        assert actions == ["CREATE", "DELETE"]


def test_praise_with_only_blank_images_rejected(app, client):
    resp = client.post("/api/feedback", json={"kind": "PRAISE", "images": [""]})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "content"
    with app.app_context():
        assert db.session.query(UserFeedback).count() == 0
