from roadboard.extensions import db
from roadboard.utils.helpers import iso, utcnow

AUDIT_ACTIONS = ("CREATE", "UPDATE", "DELETE")


class AuditLog(db.Model):
    """Append-only. No foreign keys: rows outlive the entities they describe."""

    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    entity = db.Column(db.String(40), nullable=False, index=True)
    entity_id = db.Column(db.String(64), nullable=False, index=True)  # "*" for batch operations
    action = db.Column(db.String(10), nullable=False)
    payload = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    __table_args__ = (
        db.Index("ix_audit_logs_entity_created_at", "entity", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog id={self.id} {self.entity}:{self.entity_id} {self.action}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            entity=self.entity,
            entityId=self.entity_id,
            action=self.action,
            payload=self.payload,
            createdAt=iso(self.created_at),
        )
