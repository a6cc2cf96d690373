from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from roadboard.models.board import Board
from roadboard.models.roadmap_item import ItemImage, ItemTag, RoadmapItem, normalize_status
from roadboard.models.tag import Tag
from roadboard.services.audit import write_audit
from roadboard.services.boards import get_or_create_default_board
from roadboard.services.errors import NotFound
from roadboard.services.tags import upsert_tags
from roadboard.utils.helpers import parse_date_only, utcnow
from roadboard.utils.validators import Patch

ENTITY = "RoadmapItem"


def _query(session: Session):
    return session.query(RoadmapItem).options(
        selectinload(RoadmapItem.images),
        selectinload(RoadmapItem.tag_links),
    )


def list_items(
    session: Session,
    *,
    board_id: Optional[str] = None,
    status: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[RoadmapItem]:
    """Kanban order: sort_order ASC, then newest first."""
    q = _query(session)
    if board_id:
        q = q.filter(RoadmapItem.board_id == board_id)
    if status:
        q = q.filter(RoadmapItem.status == normalize_status(status))
    if tag:
        q = q.filter(
            RoadmapItem.tag_links.any(ItemTag.tag.has(Tag.name == tag))
        )
    return q.order_by(RoadmapItem.sort_order.asc(), RoadmapItem.created_at.desc()).all()


def get_item(session: Session, item_id: str) -> RoadmapItem:
    item = session.get(RoadmapItem, item_id)
    if not item:
        raise NotFound(ENTITY, item_id)
    return item


def _set_tags(session: Session, item: RoadmapItem, tags: Iterable[Tag]) -> None:
    # Full replace. Flush the removals first so re-adding an existing pair
    # is an INSERT rather than a primary-key collision.
    item.tag_links.clear()
    session.flush()
    for t in tags:
        item.tag_links.append(ItemTag(tag_id=t.id, tag=t))


def _set_images(item: RoadmapItem, images: Iterable[dict]) -> None:
    item.images.clear()
    for img in images:
        item.images.append(ItemImage(url=img["url"], caption=img.get("caption") or ""))


def create_item(session: Session, data: dict) -> RoadmapItem:
    board_id = data.get("boardId")
    if board_id and not session.get(Board, board_id):
        raise NotFound("Board", board_id)

    # Tags commit on their own; resolve them before anything else is staged.
    tags = upsert_tags(session, data.get("tags") or [])
    if not board_id:
        board_id = get_or_create_default_board(session).id

    item = RoadmapItem(
        board_id=board_id,
        title=data["title"],
        description=data.get("description") or "",
        source=data.get("source") or "",
        jira_key=data.get("jiraKey") or "",
        priority=data.get("priority") or "P2",
        status=normalize_status(data.get("status")) or "BACKLOG",
        start_date=parse_date_only(data.get("startDate")),
        end_date=parse_date_only(data.get("endDate")),
        sort_order=data.get("sortOrder") or 0,
    )
    for t in tags:
        item.tag_links.append(ItemTag(tag_id=t.id, tag=t))
    image = data.get("image")
    if image:
        item.images.append(ItemImage(url=image["url"], caption=image.get("caption") or ""))

    session.add(item)
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=item.id, action="CREATE", payload={"item": item.to_dict()})
    session.commit()
    return item


def update_item(session: Session, item_id: str, patch: Patch) -> RoadmapItem:
    """
    Only fields present in ``patch`` change. ``tags`` and ``images`` are full
    replacements when present; an explicit null/"" date clears it.
    """
    item = get_item(session, item_id)
    if patch.provided("boardId") and not session.get(Board, patch["boardId"]):
        raise NotFound("Board", patch["boardId"])

    # Tags commit on their own; only resolve them once nothing can 404.
    tags = upsert_tags(session, patch["tags"] or []) if patch.provided("tags") else None

    if patch.provided("boardId"):
        item.board_id = patch["boardId"]
    if patch.provided("title"):
        item.title = patch["title"]
    if patch.provided("description"):
        item.description = patch["description"] or ""
    if patch.provided("source"):
        item.source = patch["source"] or ""
    if patch.provided("jiraKey"):
        item.jira_key = patch["jiraKey"] or ""
    if patch.provided("priority"):
        item.priority = patch["priority"]
    if patch.provided("status"):
        item.status = normalize_status(patch["status"])
    if patch.provided("startDate"):
        item.start_date = parse_date_only(patch["startDate"])
    if patch.provided("endDate"):
        item.end_date = parse_date_only(patch["endDate"])
    if patch.provided("sortOrder"):
        item.sort_order = patch["sortOrder"]

    if tags is not None:
        _set_tags(session, item, tags)
    if patch.provided("images"):
        _set_images(item, patch["images"] or [])

    item.updated_at = utcnow()
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=item.id, action="UPDATE", payload={"item": item.to_dict()})
    session.commit()
    return item


def add_item_image(session: Session, item_id: str, data: dict) -> ItemImage:
    item = get_item(session, item_id)
    image = ItemImage(url=data["url"], caption=data.get("caption") or "")
    item.images.append(image)
    item.updated_at = utcnow()
    session.flush()
    write_audit(session, entity=ENTITY, entity_id=item.id, action="UPDATE", payload={"item": item.to_dict()})
    session.commit()
    return image


def delete_item(session: Session, item_id: str) -> None:
    item = get_item(session, item_id)
    snapshot = item.to_dict()
    session.delete(item)
    write_audit(session, entity=ENTITY, entity_id=item_id, action="DELETE", payload={"item": snapshot})
    session.commit()


def delete_all_items(session: Session) -> int:
    """Remove every roadmap item; one audit row covers the whole wipe."""
    items = session.query(RoadmapItem).all()
    for item in items:
        session.delete(item)
    count = len(items)
    write_audit(session, entity=ENTITY, entity_id="*", action="DELETE", payload={"all": True, "count": count})
    session.commit()
    return count
