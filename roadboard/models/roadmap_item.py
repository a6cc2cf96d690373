from __future__ import annotations

from typing import List

from sqlalchemy import Index, text

from roadboard.extensions import db
from roadboard.utils.helpers import iso, new_id, utcnow

"""
Roadmap models: ordering & link constraints (doc only)

• roadmap_items
  - ix_roadmap_items_status_sort: (status, sort_order) backs the per-column
    kanban listing (sort_order ASC, created_at DESC).
  - sort_order is caller-assigned and need not be contiguous.

• item_tags
  - Composite primary key (item_id, tag_id); a duplicate link is an IntegrityError.

• item_images
  - Owned by one item; removed with it.
"""

PRIORITIES = ("P0", "P1", "P2", "P3")
STATUSES = ("BACKLOG", "NEXT_UP", "IN_PROGRESS", "DONE")
LEGACY_STATUS_ALIASES = {"PLANNED": "BACKLOG"}


def normalize_status(value):
    if not value:
        return value
    return LEGACY_STATUS_ALIASES.get(value, value)


class RoadmapItem(db.Model):
    __tablename__ = "roadmap_items"
    __allow_unmapped__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    board_id = db.Column(
        db.String(36), db.ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    source = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    jira_key = db.Column(db.String(50), nullable=False, default="", server_default=text("''"))
    priority = db.Column(db.String(8), nullable=False, default="P2", server_default=text("'P2'"))
    status = db.Column(db.String(16), nullable=False, default="BACKLOG", server_default=text("'BACKLOG'"))

    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    sort_order = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    board = db.relationship("Board", back_populates="items")
    images: List["ItemImage"] = db.relationship(
        "ItemImage",
        back_populates="item",
        order_by="ItemImage.created_at",
        cascade="all, delete-orphan",
    )
    tag_links: List["ItemTag"] = db.relationship(
        "ItemTag",
        back_populates="item",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_roadmap_items_status_sort", status, sort_order),
    )

    @property
    def tags(self):
        return [link.tag for link in self.tag_links if link.tag is not None]

    def __repr__(self) -> str:
        return f"<RoadmapItem id={self.id} title={self.title!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            boardId=self.board_id,
            title=self.title,
            description=self.description or "",
            source=self.source or "",
            jiraKey=self.jira_key or "",
            priority=self.priority,
            status=normalize_status(self.status),
            startDate=iso(self.start_date),
            endDate=iso(self.end_date),
            sortOrder=self.sort_order,
            createdAt=iso(self.created_at),
            updatedAt=iso(self.updated_at),
            images=[img.to_dict() for img in self.images],
            tags=sorted((t.to_dict() for t in self.tags), key=lambda t: t["name"]),
        )


class ItemTag(db.Model):
    __tablename__ = "item_tags"

    item_id = db.Column(
        db.String(36), db.ForeignKey("roadmap_items.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id = db.Column(
        db.String(36), db.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    item = db.relationship("RoadmapItem", back_populates="tag_links")
    tag = db.relationship("Tag", lazy="joined")

    __table_args__ = (
        Index("ix_item_tags_tag", tag_id),
    )

    def __repr__(self) -> str:
        return f"<ItemTag item_id={self.item_id} tag_id={self.tag_id}>"


class ItemImage(db.Model):
    __tablename__ = "item_images"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    item_id = db.Column(
        db.String(36), db.ForeignKey("roadmap_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = db.Column(db.String(4000), nullable=False)
    caption = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    item = db.relationship("RoadmapItem", back_populates="images")

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            itemId=self.item_id,
            url=self.url,
            caption=self.caption or "",
            createdAt=iso(self.created_at),
        )
