from sqlalchemy import create_engine, text

from roadboard.cli import roadmap
from roadboard.extensions import db
from roadboard.models import Board, RoadmapItem, Tag, UserFeedback
from roadboard.services.tags import DEFAULT_TAGS


def test_seed_tags(app):
    result = app.test_cli_runner().invoke(roadmap, ["seed-tags"])
    assert result.exit_code == 0, result.output
    with app.app_context():
        assert db.session.query(Tag).count() == len(DEFAULT_TAGS)


def test_migrate_legacy_force(app):
    with app.app_context():
        legacy = Board(name="Desktop")
        db.session.add(legacy)
        db.session.flush()
        db.session.add(RoadmapItem(board_id=legacy.id, title="Menu bar"))
        db.session.commit()

    runner = app.test_cli_runner()
    result = runner.invoke(roadmap, ["migrate-legacy"])
    assert result.exit_code == 0, result.output
    assert "status=migrated" in result.output

    result = runner.invoke(roadmap, ["migrate-legacy"])
    assert "status=skipped" in result.output

    result = runner.invoke(roadmap, ["migrate-legacy", "--force"])
    assert "status=noop" in result.output


def _legacy_sqlite(path):
    """A pre-sort_order database: user_feedback has no sort_order column."""
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE boards (id VARCHAR(36) PRIMARY KEY, name VARCHAR(80), description TEXT,"
            " sort_order INTEGER, created_at DATETIME, updated_at DATETIME)"
        ))
        conn.execute(text(
            "CREATE TABLE user_feedback (id VARCHAR(36) PRIMARY KEY, kind VARCHAR(16), user_name VARCHAR(120),"
            " email VARCHAR(200), device VARCHAR(16), feedback_type VARCHAR(16), source VARCHAR(16),"
            " language VARCHAR(16), content TEXT, todo TEXT, todo_done BOOLEAN,"
            " created_at DATETIME, updated_at DATETIME)"
        ))
        conn.execute(text(
            "INSERT INTO boards VALUES ('b1', 'Web', '', 0, '2025-01-01 00:00:00', '2025-01-01 00:00:00')"
        ))
        conn.execute(text(
            "INSERT INTO user_feedback VALUES ('f1', 'FEEDBACK', 'alice', '', '-', 'BUG', '', '', 'crash', '', 0,"
            " '2025-01-02 00:00:00', '2025-01-02 00:00:00')"
        ))
    engine.dispose()


def test_sync_db_merge_then_replace(app, tmp_path):
    src = tmp_path / "legacy.db"
    _legacy_sqlite(src)
    runner = app.test_cli_runner()

    result = runner.invoke(roadmap, ["sync-db", "--source", f"sqlite:///{src}"])
    assert result.exit_code == 0, result.output
    assert "[sync] boards: 1" in result.output

    with app.app_context():
        fb = db.session.get(UserFeedback, "f1")
        assert fb.content == "crash"
        assert fb.sort_order == 0

    # merge re-run skips existing ids
    result = runner.invoke(roadmap, ["sync-db", "--source", f"sqlite:///{src}"])
    assert "[sync] boards: 0" in result.output

    with app.app_context():
        db.session.add(Board(id="local", name="Local only"))
        db.session.commit()

    result = runner.invoke(roadmap, ["sync-db", "--source", f"sqlite:///{src}", "--mode", "replace"])
    assert result.exit_code == 0, result.output
    with app.app_context():
        assert sorted(b.id for b in db.session.query(Board).all()) == ["b1"]
