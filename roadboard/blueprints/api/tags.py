from flask import jsonify

from roadboard.extensions import db
from roadboard.services.migration import ensure_unified_roadmap
from roadboard.services.tags import ensure_default_tags, list_tags

from . import bp


@bp.get("/tags")
def get_tags():
    ensure_unified_roadmap(db.session)
    ensure_default_tags(db.session)
    return jsonify({"tags": [t.to_dict() for t in list_tags(db.session)]}), 200
