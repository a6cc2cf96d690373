from __future__ import annotations

from typing import Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from roadboard.models.tag import Tag
from roadboard.utils.validators import clean_str

DEFAULT_TAGS = (
    "Writing",
    "Inbox & Read",
    "Search",
    "AI chat",
    "Summary",
    "Todos",
    "Label",
    "Setting",
)

MAX_TAGS_PER_ITEM = 12
MAX_TAG_LENGTH = 40


def normalize_tag_names(names: Iterable[str]) -> List[str]:
    """Trim, drop blanks, clip length, de-duplicate (first wins), cap count."""
    seen = []
    for raw in names or []:
        name = clean_str(raw, max_len=MAX_TAG_LENGTH)
        if name and name not in seen:
            seen.append(name)
    return seen[:MAX_TAGS_PER_ITEM]


def upsert_tag(session: Session, name: str) -> Tag:
    """
    Find-or-create by unique name. A concurrent insert of the same name is
    resolved by re-reading the winner. Commits the new tag on its own.
    """
    tag = session.query(Tag).filter(Tag.name == name).one_or_none()
    if tag:
        return tag
    tag = Tag(name=name)
    session.add(tag)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        tag = session.query(Tag).filter(Tag.name == name).one()
    return tag


def upsert_tags(session: Session, names: Iterable[str]) -> List[Tag]:
    return [upsert_tag(session, name) for name in normalize_tag_names(names)]


def ensure_default_tags(session: Session) -> None:
    existing = {row[0] for row in session.query(Tag.name).filter(Tag.name.in_(DEFAULT_TAGS)).all()}
    for name in DEFAULT_TAGS:
        if name not in existing:
            upsert_tag(session, name)


def list_tags(session: Session) -> List[Tag]:
    return session.query(Tag).order_by(Tag.name.asc()).all()
