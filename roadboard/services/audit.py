from __future__ import annotations

import json
from typing import Any

from flask import current_app
from sqlalchemy.orm import Session

from roadboard.models.audit_log import AUDIT_ACTIONS, AuditLog


def _snapshot(payload: Any) -> str:
    """Best-effort JSON; never fails the mutation it describes."""
    if payload is None:
        return ""
    try:
        return json.dumps(payload, default=str, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        current_app.logger.warning(
            "audit_snapshot_failed", extra={"event": "audit_snapshot_failed", "reason": str(exc)}
        )
        return json.dumps({"unserializable": repr(payload)[:2000]})


def write_audit(session: Session, *, entity: str, entity_id: str, action: str, payload: Any = None) -> AuditLog:
    """
    Stage one AuditLog row in ``session``. The caller commits it together with
    the mutation it records, so an audit row exists iff the mutation persisted.
    """
    if action not in AUDIT_ACTIONS:
        raise ValueError(f"unknown audit action {action!r}")
    row = AuditLog(
        entity=entity,
        entity_id=str(entity_id),
        action=action,
        payload=_snapshot(payload),
    )
    session.add(row)
    return row
