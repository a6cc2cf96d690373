import os

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")

    # Database (env in prod; dev/test may use a local SQLite file)
    try:
        from dotenv import dotenv_values
        _ENV_FALLBACK = dotenv_values(".env")
    except Exception:
        _ENV_FALLBACK = {}
    SQLALCHEMY_DATABASE_URI = (
        os.environ.get("DATABASE_URL")
        or _ENV_FALLBACK.get("DATABASE_URL")
        or "sqlite:///roadboard.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    JSON_SORT_KEYS = False

    # Flask-Limiter default: off globally; prefer per-route limits
    RATELIMIT_DEFAULT = None

    # --- Uploads ---
    # Local fallback folder; served at /uploads/feedback/<name>
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))
    # Hard request cap (multipart overhead on top of the image itself)
    MAX_CONTENT_LENGTH = UPLOAD_MAX_BYTES + 1024 * 1024

    # Remote blob store (S3). When the bucket is unset, uploads go to UPLOAD_FOLDER.
    UPLOAD_S3_BUCKET = os.getenv("UPLOAD_S3_BUCKET")
    UPLOAD_S3_PREFIX = os.getenv("UPLOAD_S3_PREFIX", "feedback/")
    UPLOAD_S3_REGION = os.getenv("UPLOAD_S3_REGION", "us-east-1")
    # Public base for object URLs, e.g. a CDN in front of the bucket
    UPLOAD_PUBLIC_BASE_URL = os.getenv("UPLOAD_PUBLIC_BASE_URL", "")

    # --- OCR (OpenAI) ---
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_OCR_MODEL = os.getenv("OPENAI_OCR_MODEL", "gpt-4o-mini")
    OCR_FETCH_TIMEOUT = int(os.getenv("OCR_FETCH_TIMEOUT", "20"))

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    # REQUIRE env vars in production (fail fast if missing)
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False

_ENV_MAP = {
    "development": DevelopmentConfig,
    "staging": ProductionConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
