from flask import jsonify, request

from roadboard.extensions import db
from roadboard.services import boards as board_service

from . import bp
from .validators import board_create_schema, board_update_schema


@bp.get("/boards")
def list_boards():
    rows = board_service.list_boards(db.session)
    return jsonify({"boards": [b.to_dict() for b in rows]}), 200


@bp.post("/boards")
def create_board():
    data = board_create_schema.validate(request.get_json(silent=True))
    board = board_service.create_board(db.session, data)
    return jsonify({"board": board.to_dict()}), 201


@bp.get("/boards/<board_id>")
def get_board(board_id):
    board = board_service.get_board(db.session, board_id)
    return jsonify({"board": board.to_dict()}), 200


@bp.patch("/boards/<board_id>")
def update_board(board_id):
    patch = board_update_schema.validate(request.get_json(silent=True), partial=True)
    board = board_service.update_board(db.session, board_id, patch)
    return jsonify({"board": board.to_dict()}), 200


@bp.delete("/boards/<board_id>")
def delete_board(board_id):
    board_service.delete_board(db.session, board_id)
    return "", 204
