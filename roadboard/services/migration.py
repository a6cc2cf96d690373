"""
One-time, best-effort fold of legacy multi-board data into the single
default board + tags model.

For every item that lives on a board other than the default ("All") board:
  - a Tag named after its board is found or created,
  - the item moves to the default board,
  - an ItemTag links the item to that tag.

Every step is idempotent (find-then-create, unique-name tag lookup, duplicate
links ignored), so concurrent requests may both run it. Completion is a
process-wide flag; a new process re-checks storage with a single fast query.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from roadboard.extensions import db
from roadboard.models.board import Board
from roadboard.models.roadmap_item import ItemTag, RoadmapItem
from roadboard.models.tag import Tag
from roadboard.services.boards import get_or_create_default_board
from roadboard.services.tags import upsert_tag
from roadboard.utils.helpers import utcnow


@dataclass(frozen=True)
class MigrationResult:
    status: str  # skipped | noop | migrated | failed
    moved_items: int = 0
    linked_tags: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class _RunOnce:
    def __init__(self):
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    def mark_done(self) -> None:
        with self._lock:
            self._done = True

    def reset(self) -> None:
        with self._lock:
            self._done = False


_guard = _RunOnce()


def is_migrated() -> bool:
    return _guard.done


def reset_migration_state() -> None:
    _guard.reset()


def _link(session: Session, item_id: str, tag_id: str) -> bool:
    """Insert one ItemTag inside a savepoint; a duplicate is ignored."""
    try:
        with session.begin_nested():
            session.add(ItemTag(item_id=item_id, tag_id=tag_id))
        return True
    except IntegrityError:
        return False


def _migrate(session: Session) -> MigrationResult:
    default_board = get_or_create_default_board(session)
    default_id = default_board.id
    session.commit()

    pending = (
        session.query(RoadmapItem.id)
        .filter(RoadmapItem.board_id != default_id)
        .first()
    )
    if not pending:
        return MigrationResult(status="noop")

    boards = (
        session.query(Board.id, Board.name)
        .filter(Board.id != default_id)
        .all()
    )
    if not boards:
        return MigrationResult(status="noop")

    tag_by_board: Dict[str, Tag] = {}
    for board_id, name in boards:
        tag_by_board[board_id] = upsert_tag(session, name)
    tag_id_by_board = {board_id: tag.id for board_id, tag in tag_by_board.items()}

    legacy_ids = list(tag_id_by_board)
    items = (
        session.query(RoadmapItem.id, RoadmapItem.board_id)
        .filter(RoadmapItem.board_id.in_(legacy_ids))
        .all()
    )
    if not items:
        return MigrationResult(status="noop")

    existing = {
        (item_id, tag_id)
        for item_id, tag_id in session.query(ItemTag.item_id, ItemTag.tag_id)
        .filter(ItemTag.item_id.in_([item_id for item_id, _ in items]))
        .all()
    }

    # Single transaction: move items, then attach former-board tags.
    try:
        session.execute(
            update(RoadmapItem)
            .where(RoadmapItem.board_id.in_(legacy_ids))
            .values(board_id=default_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        linked = 0
        for item_id, board_id in items:
            tag_id = tag_id_by_board.get(board_id)
            if not tag_id or (item_id, tag_id) in existing:
                continue
            if _link(session, item_id, tag_id):
                linked += 1
        session.commit()
    except Exception:
        session.rollback()
        raise

    # Loaded instances may still carry the old board_id
    session.expire_all()
    return MigrationResult(status="migrated", moved_items=len(items), linked_tags=linked)


def ensure_unified_roadmap(session: Optional[Session] = None) -> MigrationResult:
    """
    Run the legacy migration unless this process already did.
    Never raises: failures are logged, recorded in the result, and still mark
    the migration as done so read requests are never blocked by it.
    """
    if _guard.done:
        return MigrationResult(status="skipped")

    session = session or db.session
    try:
        result = _migrate(session)
    except Exception as exc:
        session.rollback()
        current_app.logger.warning(
            "legacy_migration_failed",
            extra={"event": "legacy_migration_failed", "reason": str(exc)},
        )
        result = MigrationResult(status="failed", error=str(exc))

    _guard.mark_done()
    if result.status == "migrated":
        current_app.logger.info(
            "legacy_migration_done",
            extra={
                "event": "legacy_migration_done",
                "moved_items": result.moved_items,
                "linked_tags": result.linked_tags,
            },
        )
    return result
