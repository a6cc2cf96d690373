from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from flask import current_app
from sqlalchemy import text, update
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from roadboard.services.audit import write_audit
from roadboard.services.errors import NotFound
from roadboard.utils.validators import ValidationError

MAX_BATCH = 500
ORDER_COLUMN = "sort_order"


@dataclass(frozen=True)
class ReorderUpdate:
    id: str
    sort_order: int
    status: Optional[str] = None

    @classmethod
    def from_payload(cls, row: dict) -> "ReorderUpdate":
        return cls(id=row["id"], sort_order=row["sortOrder"], status=row.get("status"))


def _values(u: ReorderUpdate) -> dict:
    # Only ordering (and group) columns; updated_at and every other field stay as they are.
    values = {ORDER_COLUMN: u.sort_order}
    if u.status is not None:
        values["status"] = u.status
    return values


def is_missing_order_column(exc: Exception) -> bool:
    """True when the database rejected the statement because sort_order does not exist yet."""
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    msg = str(getattr(exc, "orig", None) or exc).lower()
    return ORDER_COLUMN in msg and (
        "no such column" in msg
        or "does not exist" in msg
        or "unknown column" in msg
        or "has no column" in msg
    )


def _apply_batch(session: Session, model, updates: Sequence[ReorderUpdate], entity: str) -> None:
    """All rows or none: an unknown id aborts the batch."""
    for u in updates:
        result = session.execute(
            update(model)
            .where(model.id == u.id)
            .values(**_values(u))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound(entity, u.id)


def _apply_raw(session: Session, model, updates: Sequence[ReorderUpdate]) -> None:
    """
    Schema-compatibility path: one raw statement per row, each committed on its
    own. A failing statement is raised; rows applied before it stay applied.
    """
    table = model.__table__.name
    for u in updates:
        sets = [f"{ORDER_COLUMN} = :sort_order"]
        params = {"sort_order": u.sort_order, "id": u.id}
        if u.status is not None:
            sets.append("status = :status")
            params["status"] = u.status
        try:
            session.execute(text(f"UPDATE {table} SET {', '.join(sets)} WHERE id = :id"), params)
            session.commit()
        except Exception:
            session.rollback()
            raise


def apply_reorder(session: Session, model, updates: Iterable[ReorderUpdate], *, entity: str) -> int:
    """
    Persist new ordering (and, for grouped entities, new group membership) for a
    batch of rows, then record one audit row for the whole batch.

    The caller computes every sort_order; gaps left in a source column are not
    closed here. Returns the number of tuples applied.
    """
    updates: List[ReorderUpdate] = list(updates)
    if not updates:
        raise ValidationError("updates", "must contain at least 1 item(s)")
    if len(updates) > MAX_BATCH:
        raise ValidationError("updates", f"must contain at most {MAX_BATCH} item(s)")

    count = len(updates)
    try:
        _apply_batch(session, model, updates, entity)
    except NotFound:
        session.rollback()
        raise
    except (OperationalError, ProgrammingError) as exc:
        session.rollback()
        if not is_missing_order_column(exc):
            raise
        current_app.logger.warning(
            "reorder_fallback_raw",
            extra={"event": "reorder_fallback_raw", "entity": entity, "count": count, "reason": str(exc)},
        )
        _apply_raw(session, model, updates)

    write_audit(
        session,
        entity=entity,
        entity_id="*",
        action="UPDATE",
        payload={"reorder": True, "count": count},
    )
    session.commit()

    current_app.logger.info(
        "reorder_applied", extra={"event": "reorder_applied", "entity": entity, "count": count}
    )
    return count
