from __future__ import annotations

from typing import List

from sqlalchemy import Index, text

from roadboard.extensions import db
from roadboard.utils.helpers import iso, new_id, utcnow


class Board(db.Model):
    __tablename__ = "boards"
    __allow_unmapped__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    # Not unique: legacy installs may hold duplicate names
    name = db.Column(db.String(80), nullable=False)
    description = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    sort_order = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    items: List["RoadmapItem"] = db.relationship(
        "RoadmapItem",
        back_populates="board",
        lazy="select",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_boards_name", name),
        Index("ix_boards_sort_order", sort_order),
    )

    def __repr__(self) -> str:
        return f"<Board id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            name=self.name,
            description=self.description or "",
            sortOrder=self.sort_order,
            createdAt=iso(self.created_at),
            updatedAt=iso(self.updated_at),
        )
