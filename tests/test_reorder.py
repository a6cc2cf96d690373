import json

import pytest
from sqlalchemy.exc import OperationalError

from roadboard.extensions import db
from roadboard.models import AuditLog, Board, RoadmapItem, UserFeedback
from roadboard.services import reorder as reorder_mod
from roadboard.services.errors import NotFound
from roadboard.services.reorder import ReorderUpdate, apply_reorder, is_missing_order_column


def _seed_items(*ids, status="BACKLOG"):
    board = Board(name="All")
    db.session.add(board)
    db.session.flush()
    for i, item_id in enumerate(ids):
        db.session.add(RoadmapItem(id=item_id, board_id=board.id, title=f"Item {item_id}", status=status, sort_order=i))
    db.session.commit()


def _audit_rows(entity):
    return db.session.query(AuditLog).filter_by(entity=entity).all()


def test_reorder_moves_items_into_done_column(app, client):
    with app.app_context():
        _seed_items("a", "b")

    resp = client.post("/api/items/reorder", json={"updates": [
        {"id": "a", "status": "DONE", "sortOrder": 0},
        {"id": "b", "status": "DONE", "sortOrder": 1000},
    ]})
    assert resp.status_code == 200
    assert resp.get_json() == {"updated": 2}

    listed = client.get("/api/items?status=DONE").get_json()["items"]
    assert [it["id"] for it in listed] == ["a", "b"]

    with app.app_context():
        rows = _audit_rows("RoadmapItem")
        assert len(rows) == 1
        assert rows[0].entity_id == "*"
        assert rows[0].action == "UPDATE"
        assert json.loads(rows[0].payload) == {"reorder": True, "count": 2}


def test_reorder_does_not_touch_updated_at(app):
    with app.app_context():
        _seed_items("a")
        before = db.session.get(RoadmapItem, "a").updated_at
        apply_reorder(db.session, RoadmapItem, [ReorderUpdate("a", 5000, "NEXT_UP")], entity="RoadmapItem")
        item = db.session.get(RoadmapItem, "a")
        assert item.sort_order == 5000
        assert item.status == "NEXT_UP"
        assert item.updated_at == before


def test_reorder_unknown_id_rolls_back_whole_batch(app, client):
    with app.app_context():
        _seed_items("a", "b")

    resp = client.post("/api/items/reorder", json={"updates": [
        {"id": "a", "status": "DONE", "sortOrder": 10},
        {"id": "missing", "sortOrder": 20},
    ]})
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"

    with app.app_context():
        a = db.session.get(RoadmapItem, "a")
        assert a.status == "BACKLOG"
        assert a.sort_order == 0
        assert _audit_rows("RoadmapItem") == []


def test_reorder_validation_errors(client):
    assert client.post("/api/items/reorder", json={"updates": []}).status_code == 400
    assert client.post("/api/items/reorder", json={}).status_code == 400
    resp = client.post("/api/items/reorder", json={"updates": [{"id": "a", "sortOrder": "x"}]})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "updates[0].sortOrder"


def test_feedback_reorder(app, client):
    with app.app_context():
        db.session.add_all([
            UserFeedback(id="f1", kind="FEEDBACK", content="one", sort_order=0),
            UserFeedback(id="f2", kind="FEEDBACK", content="two", sort_order=1),
        ])
        db.session.commit()

    resp = client.post("/api/feedback/reorder", json={"updates": [
        {"id": "f2", "sortOrder": 0},
        {"id": "f1", "sortOrder": 1},
    ]})
    assert resp.status_code == 200
    listed = client.get("/api/feedback?kind=FEEDBACK").get_json()["items"]
    assert [f["id"] for f in listed] == ["f2", "f1"]

    with app.app_context():
        assert len(_audit_rows("UserFeedback")) == 1


def _missing_column_error():
    return OperationalError("UPDATE user_feedback ...", {}, Exception("no such column: sort_order"))


def test_is_missing_order_column():
    assert is_missing_order_column(_missing_column_error())
    assert not is_missing_order_column(OperationalError("x", {}, Exception("database is locked")))
    assert not is_missing_order_column(ValueError("no such column: sort_order"))


def test_fallback_runs_raw_updates_on_missing_column(app, monkeypatch):
    with app.app_context():
        db.session.add_all([
            UserFeedback(id="f1", content="one", sort_order=0),
            UserFeedback(id="f2", content="two", sort_order=1),
        ])
        db.session.commit()

        def broken_batch(*args, **kwargs):
            raise _missing_column_error()

        monkeypatch.setattr(reorder_mod, "_apply_batch", broken_batch)
        count = apply_reorder(
            db.session,
            UserFeedback,
            [ReorderUpdate("f1", 7), ReorderUpdate("f2", 3)],
            entity="UserFeedback",
        )
        assert count == 2
        assert db.session.get(UserFeedback, "f1").sort_order == 7
        assert db.session.get(UserFeedback, "f2").sort_order == 3
        assert len(_audit_rows("UserFeedback")) == 1


def test_other_database_errors_are_not_retried(app, monkeypatch):
    with app.app_context():
        calls = []

        def locked(*args, **kwargs):
            raise OperationalError("x", {}, Exception("database is locked"))

        monkeypatch.setattr(reorder_mod, "_apply_batch", locked)
        monkeypatch.setattr(reorder_mod, "_apply_raw", lambda *a, **k: calls.append(a))
        with pytest.raises(OperationalError):
            apply_reorder(db.session, UserFeedback, [ReorderUpdate("f1", 1)], entity="UserFeedback")
        assert calls == []


def test_not_found_is_raised_by_service(app):
    with app.app_context():
        with pytest.raises(NotFound):
            apply_reorder(db.session, RoadmapItem, [ReorderUpdate("nope", 1)], entity="RoadmapItem")


def test_reorder_sort_order_out_of_range_is_400(app, client):
    with app.app_context():
        _seed_items("a")

    resp = client.post("/api/items/reorder", json={"updates": [{"id": "a", "sortOrder": 2 ** 63}]})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "updates[0].sortOrder"

    resp = client.post("/api/feedback/reorder", json={"updates": [{"id": "a", "sortOrder": 2 ** 31}]})
    assert resp.status_code == 400

    with app.app_context():
        assert db.session.get(RoadmapItem, "a").sort_order == 0
        assert _audit_rows("RoadmapItem") == []
