from __future__ import annotations

from typing import List

from sqlalchemy import Index, text

from roadboard.extensions import db
from roadboard.utils.helpers import iso, new_id, utcnow

KINDS = ("FEEDBACK", "PRAISE")
DEVICES = ("IOS", "MAC", "WIN", "ANDROID", "PC", "-")
FEEDBACK_TYPES = ("REQUEST", "SUGGESTION", "BUG")
PRAISE_SOURCES = ("EMAIL", "STORE", "SOCIAL")
LANGUAGES = ("ZH_CN", "ZH_TW", "EN", "JA", "FR")


class UserFeedback(db.Model):
    __tablename__ = "user_feedback"
    __allow_unmapped__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    kind = db.Column(db.String(16), nullable=False, default="FEEDBACK", server_default=text("'FEEDBACK'"))

    user_name = db.Column(db.String(120), nullable=False, default="", server_default=text("''"))
    email = db.Column(db.String(200), nullable=False, default="", server_default=text("''"))

    # FEEDBACK only
    device = db.Column(db.String(16), nullable=False, default="-", server_default=text("'-'"))
    feedback_type = db.Column(db.String(16), nullable=False, default="", server_default=text("''"))
    # PRAISE only
    source = db.Column(db.String(16), nullable=False, default="", server_default=text("''"))
    language = db.Column(db.String(16), nullable=False, default="", server_default=text("''"))

    content = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    # JSON list of {text, done}; see roadboard.utils.todos
    todo = db.Column(db.Text, nullable=False, default="", server_default=text("''"))
    todo_done = db.Column(db.Boolean, nullable=False, default=False, server_default=text("false"))

    sort_order = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    images: List["FeedbackImage"] = db.relationship(
        "FeedbackImage",
        back_populates="feedback",
        order_by="FeedbackImage.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_user_feedback_kind_sort", kind, sort_order),
    )

    def __repr__(self) -> str:
        return f"<UserFeedback id={self.id} kind={self.kind!r}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            kind=self.kind,
            userName=self.user_name or "",
            email=self.email or "",
            device=self.device or "-",
            feedbackType=self.feedback_type or "",
            source=self.source or "",
            language=self.language or "",
            content=self.content or "",
            todo=self.todo or "",
            todoDone=bool(self.todo_done),
            sortOrder=self.sort_order,
            createdAt=iso(self.created_at),
            updatedAt=iso(self.updated_at),
            images=[{"id": img.id, "url": img.url} for img in self.images],
        )


class FeedbackImage(db.Model):
    __tablename__ = "feedback_images"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    feedback_id = db.Column(
        db.String(36), db.ForeignKey("user_feedback.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = db.Column(db.String(4000), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    feedback = db.relationship("UserFeedback", back_populates="images")
