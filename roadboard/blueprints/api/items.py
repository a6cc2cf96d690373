from flask import jsonify, request

from roadboard.extensions import db
from roadboard.models.roadmap_item import RoadmapItem
from roadboard.services import items as item_service
from roadboard.services.migration import ensure_unified_roadmap
from roadboard.services.reorder import ReorderUpdate, apply_reorder

from . import bp
from .validators import item_create_schema, item_image_schema, item_reorder_schema, item_update_schema


@bp.get("/items")
def list_items():
    # Best-effort fold of legacy boards into tags; never fails the read
    ensure_unified_roadmap(db.session)

    rows = item_service.list_items(
        db.session,
        board_id=(request.args.get("boardId") or "").strip() or None,
        status=(request.args.get("status") or "").strip() or None,
        tag=(request.args.get("tag") or "").strip() or None,
    )
    return jsonify({"items": [it.to_dict() for it in rows]}), 200


@bp.post("/items")
def create_item():
    data = item_create_schema.validate(request.get_json(silent=True))
    item = item_service.create_item(db.session, data)
    return jsonify({"item": item.to_dict()}), 201


@bp.delete("/items")
def delete_all_items():
    count = item_service.delete_all_items(db.session)
    return jsonify({"deleted": count}), 200


@bp.post("/items/reorder")
def reorder_items():
    body = item_reorder_schema.validate(request.get_json(silent=True))
    updates = [ReorderUpdate.from_payload(u) for u in body["updates"]]
    count = apply_reorder(db.session, RoadmapItem, updates, entity="RoadmapItem")
    return jsonify({"updated": count}), 200


@bp.get("/items/<item_id>")
def get_item(item_id):
    item = item_service.get_item(db.session, item_id)
    return jsonify({"item": item.to_dict()}), 200


@bp.patch("/items/<item_id>")
def update_item(item_id):
    patch = item_update_schema.validate(request.get_json(silent=True), partial=True)
    item = item_service.update_item(db.session, item_id, patch)
    return jsonify({"item": item.to_dict()}), 200


@bp.delete("/items/<item_id>")
def delete_item(item_id):
    item_service.delete_item(db.session, item_id)
    return "", 204


@bp.post("/items/<item_id>/images")
def add_item_image(item_id):
    data = item_image_schema.validate(request.get_json(silent=True))
    image = item_service.add_item_image(db.session, item_id, data)
    return jsonify({"image": image.to_dict()}), 201
