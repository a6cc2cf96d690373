from roadboard.extensions import db
from roadboard.utils.helpers import iso, new_id, utcnow


class Tag(db.Model):
    __tablename__ = "tags"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(80), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Tag id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return dict(id=self.id, name=self.name, createdAt=iso(self.created_at))
