import os
from flask import Flask, jsonify, send_from_directory, current_app

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=False)


from .config import get_config
from .extensions import db, migrate, limiter
from .security import init_security
from .observability import init_logging, init_sentry

def create_app():
    app = Flask(__name__)

    # ---- Rate limiting storage configuration ----
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    use_redis = app_env in ("staging", "production")
    storage_uri = os.environ.get("REDIS_URL") if use_redis else "memory://"
    if use_redis and not storage_uri:
        # Hard fail in stage/prod so we never silently run without RL storage
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    app.config["RATELIMIT_STORAGE_URI"] = storage_uri
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        # Enforce hard requirements at startup (not at import time)
        _require("SECRET_KEY")
        _require("DATABASE_URL")
        app.config["SQLALCHEMY_DATABASE_URI"] = _require("DATABASE_URL")

    # --- Observability & Security ---
    init_logging(app)
    init_sentry(app)

    if app_env in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    limiter.init_app(app)

    # Models must be imported before migrations/create_all see the metadata
    from . import models  # noqa: F401

    from .blueprints.api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    # Local upload fallback (S3 uploads are served by the bucket/CDN)
    @app.get("/uploads/feedback/<path:filename>")
    def uploaded_feedback_image(filename):
        folder = os.path.join(current_app.config["UPLOAD_FOLDER"], "feedback")
        return send_from_directory(folder, filename)

    @limiter.exempt
    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    # Error handlers (JSON everywhere; this app has no HTML pages)
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found", "code": 404}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "method_not_allowed", "code": 405}), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "payload_too_large", "code": 413}), 413

    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        payload = {"error": "rate_limited", "code": 429}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
            payload["retry_after"] = int(retry_after)
        return jsonify(payload), 429, headers

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "server_error", "code": 500}), 500

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app
