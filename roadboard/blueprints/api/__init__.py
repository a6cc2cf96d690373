from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from roadboard.extensions import db
from roadboard.services.errors import NotFound, ServiceError
from roadboard.utils.validators import ValidationError

bp = Blueprint("api", __name__)


@bp.errorhandler(ValidationError)
def _validation_error(e):
    return jsonify(e.to_dict()), 400


@bp.errorhandler(NotFound)
def _not_found(e):
    return jsonify({"error": "not_found", "detail": str(e)}), 404


@bp.errorhandler(ServiceError)
def _service_error(e):
    status = getattr(e, "status_code", 400)
    return jsonify({"error": "bad_request" if status < 500 else "server_error", "detail": str(e)}), status


@bp.errorhandler(SQLAlchemyError)
def _db_error(e):
    db.session.rollback()
    current_app.logger.exception("database error", extra={"event": "db_error"})
    return jsonify({"error": "server_error"}), 500


from . import boards, items, feedback, tags, ai  # noqa: E402,F401
