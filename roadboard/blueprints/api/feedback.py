from flask import jsonify, request

from roadboard.extensions import db, limiter
from roadboard.models.feedback import UserFeedback
from roadboard.services import feedback as feedback_service
from roadboard.services.reorder import ReorderUpdate, apply_reorder
from roadboard.services.storage import save_feedback_image

from . import bp
from .validators import (
    feedback_create_schema,
    feedback_reorder_schema,
    feedback_update_schema,
    todo_toggle_schema,
)


@bp.get("/feedback")
def list_feedback():
    rows = feedback_service.list_feedback(
        db.session,
        kind=request.args.get("kind"),
        q=request.args.get("q"),
        open_todos=request.args.get("openTodos") in ("1", "true"),
    )
    return jsonify({"items": [r.to_dict() for r in rows]}), 200


@bp.post("/feedback")
def create_feedback():
    data = feedback_create_schema.validate(request.get_json(silent=True))
    fb = feedback_service.create_feedback(db.session, data)
    return jsonify({"item": fb.to_dict()}), 201


@bp.post("/feedback/reorder")
def reorder_feedback():
    body = feedback_reorder_schema.validate(request.get_json(silent=True))
    updates = [ReorderUpdate.from_payload(u) for u in body["updates"]]
    count = apply_reorder(db.session, UserFeedback, updates, entity="UserFeedback")
    return jsonify({"updated": count}), 200


@bp.post("/feedback/upload")
@limiter.limit("30 per minute")
def upload_feedback_image():
    url = save_feedback_image(request.files.get("file"))
    return jsonify({"url": url}), 201


@bp.get("/feedback/<feedback_id>")
def get_feedback(feedback_id):
    fb = feedback_service.get_feedback(db.session, feedback_id)
    return jsonify({"item": fb.to_dict()}), 200


@bp.patch("/feedback/<feedback_id>")
def update_feedback(feedback_id):
    patch = feedback_update_schema.validate(request.get_json(silent=True), partial=True)
    fb = feedback_service.update_feedback(db.session, feedback_id, patch)
    return jsonify({"item": fb.to_dict()}), 200


@bp.patch("/feedback/<feedback_id>/todos/<int:index>")
def toggle_todo(feedback_id, index):
    body = todo_toggle_schema.validate(request.get_json(silent=True) or {})
    fb = feedback_service.toggle_todo(db.session, feedback_id, index, body.get("done"))
    return jsonify({"item": fb.to_dict()}), 200


@bp.delete("/feedback/<feedback_id>")
def delete_feedback(feedback_id):
    feedback_service.delete_feedback(db.session, feedback_id)
    return "", 204
