import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from roadboard import create_app
from roadboard.extensions import db
from roadboard.services.migration import reset_migration_state


@pytest.fixture(scope="session")
def upload_root(tmp_path_factory):
    return tmp_path_factory.mktemp("uploads")


@pytest.fixture(scope="session")
def app(upload_root):
    app = create_app()
    app.config.update(
        TESTING=True,
        UPLOAD_FOLDER=str(upload_root),
        UPLOAD_S3_BUCKET=None,
        OPENAI_API_KEY="",
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _wipe(app):
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    _wipe(app)
    reset_migration_state()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    _wipe(app)
    reset_migration_state()
