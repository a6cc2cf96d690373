from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from roadboard.models.feedback import KINDS, FeedbackImage, UserFeedback
from roadboard.services.audit import write_audit
from roadboard.services.errors import NotFound, ServiceError
from roadboard.utils.helpers import utcnow
from roadboard.utils.todos import has_open_todos, set_todo_done
from roadboard.utils.validators import Patch

ENTITY = "UserFeedback"


def normalize_kind(value: Optional[str]) -> str:
    """Unknown or missing kinds read as FEEDBACK."""
    return value if value in KINDS else "FEEDBACK"


def list_feedback(
    session: Session,
    *,
    kind: Optional[str] = None,
    q: Optional[str] = None,
    open_todos: bool = False,
) -> List[UserFeedback]:
    query = (
        session.query(UserFeedback)
        .options(selectinload(UserFeedback.images))
        .filter(UserFeedback.kind == normalize_kind(kind))
    )
    term = (q or "").strip()
    if term:
        like = f"%{term}%"
        query = query.filter(
            or_(
                UserFeedback.user_name.like(like),
                UserFeedback.email.like(like),
                UserFeedback.content.like(like),
                UserFeedback.todo.like(like),
            )
        )
    rows = query.order_by(UserFeedback.sort_order.asc(), UserFeedback.created_at.desc()).all()
    if open_todos:
        # todo is serialized text; filter after decoding
        rows = [r for r in rows if has_open_todos(r.todo)]
    return rows


def get_feedback(session: Session, feedback_id: str) -> UserFeedback:
    fb = session.get(UserFeedback, feedback_id)
    if not fb:
        raise NotFound(ENTITY, feedback_id)
    return fb


def _next_sort_order(session: Session, kind: str) -> int:
    current = (
        session.query(func.max(UserFeedback.sort_order))
        .filter(UserFeedback.kind == kind)
        .scalar()
    )
    return 0 if current is None else current + 1


def _set_images(fb: UserFeedback, urls: Iterable[str]) -> None:
    fb.images.clear()
    for url in urls:
        if url:
            fb.images.append(FeedbackImage(url=url))


def create_feedback(session: Session, data: dict) -> UserFeedback:
    """
    New rows go last within their kind. Kind-specific fields get their
    defaults; fields that do not apply to the kind are stored blank.
    """
    kind = normalize_kind(data.get("kind"))
    is_feedback = kind == "FEEDBACK"

    fb = UserFeedback(
        kind=kind,
        user_name=data.get("userName") or "",
        email=data.get("email") or "",
        device=(data.get("device") or "-") if is_feedback else "-",
        feedback_type=(data.get("feedbackType") or "REQUEST") if is_feedback else "",
        source="" if is_feedback else (data.get("source") or "EMAIL"),
        language="" if is_feedback else (data.get("language") or "ZH_CN"),
        content=data.get("content") or "",
        todo=data.get("todo") or "",
        todo_done=bool(data.get("todoDone")),
        sort_order=_next_sort_order(session, kind),
    )
    if not is_feedback:
        _set_images(fb, data.get("images") or [])

    session.add(fb)
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=fb.id, action="CREATE", payload={"item": fb.to_dict()})
    session.commit()
    return fb


def update_feedback(session: Session, feedback_id: str, patch: Patch) -> UserFeedback:
    """
    Presence-gated update. Switching ``kind`` clears the fields that belong
    to the other kind unless the same request sets them explicitly.
    """
    fb = get_feedback(session, feedback_id)

    kind_sent = patch.provided("kind") and patch["kind"] is not None
    if kind_sent:
        fb.kind = patch["kind"]

    for key, attr in (("userName", "user_name"), ("email", "email"), ("content", "content"), ("todo", "todo")):
        if patch.provided(key):
            setattr(fb, attr, patch[key] or "")
    if patch.provided("todoDone"):
        fb.todo_done = bool(patch["todoDone"])

    if patch.provided("device"):
        fb.device = patch["device"] or "-"

    if patch.provided("source"):
        fb.source = patch["source"] or ""
    elif kind_sent and patch["kind"] == "FEEDBACK":
        fb.source = ""

    if patch.provided("language"):
        fb.language = patch["language"] or ""
    elif kind_sent and patch["kind"] == "FEEDBACK":
        fb.language = ""

    if patch.provided("feedbackType"):
        fb.feedback_type = patch["feedbackType"] or ""
    elif kind_sent and patch["kind"] == "PRAISE":
        fb.feedback_type = ""

    if patch.provided("images"):
        _set_images(fb, patch["images"] or [])

    fb.updated_at = utcnow()
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=fb.id, action="UPDATE", payload={"item": fb.to_dict()})
    session.commit()
    return fb


def toggle_todo(session: Session, feedback_id: str, index: int, done: Optional[bool] = None) -> UserFeedback:
    """Set (or flip) the ``done`` flag of one to-do entry."""
    fb = get_feedback(session, feedback_id)
    try:
        fb.todo = set_todo_done(fb.todo, index, done)
    except IndexError:
        raise ServiceError(f"todo index {index} out of range")
    fb.updated_at = utcnow()
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=fb.id, action="UPDATE", payload={"item": fb.to_dict()})
    session.commit()
    return fb


def delete_feedback(session: Session, feedback_id: str) -> None:
    fb = get_feedback(session, feedback_id)
    snapshot = fb.to_dict()
    session.delete(fb)
    write_audit(session, entity=ENTITY, entity_id=feedback_id, action="DELETE", payload={"item": snapshot})
    session.commit()
