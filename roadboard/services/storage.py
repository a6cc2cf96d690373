"""Upload storage for feedback images: S3 when a bucket is configured, local disk otherwise."""

from __future__ import annotations

import os
import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from roadboard.services.errors import ServiceError

_MIME_EXT = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class UploadError(ServiceError):
    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class StorageBackend(ABC):
    """Stores one object and returns the URL clients should use to fetch it."""

    @abstractmethod
    def save_file(self, data: bytes, name: str, content_type: str) -> str:
        pass


class LocalStorageBackend(StorageBackend):
    """Files under ``<base_path>/feedback``, served by the app at /uploads/feedback/<name>."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path) / "feedback"

    def save_file(self, data: bytes, name: str, content_type: str) -> str:
        self.base_path.mkdir(parents=True, exist_ok=True)
        with open(self.base_path / name, "wb") as f:
            f.write(data)
        return f"/uploads/feedback/{name}"


class S3StorageBackend(StorageBackend):
    def __init__(self, bucket_name: str, prefix: str = "feedback/", region_name: str = "us-east-1",
                 public_base_url: str = "", client=None):
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.region_name = region_name
        self.public_base_url = public_base_url.rstrip("/")
        self.s3_client = client or boto3.session.Session(region_name=region_name).client("s3")

    def _key(self, name: str) -> str:
        return f"{self.prefix.rstrip('/')}/{name.lstrip('/')}"

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com/{key}"

    def save_file(self, data: bytes, name: str, content_type: str) -> str:
        key = self._key(name)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise RuntimeError(f"Failed to save to S3: {e}") from e
        return self.public_url(key)


def get_storage_backend(config) -> StorageBackend:
    bucket = config.get("UPLOAD_S3_BUCKET")
    if bucket:
        return S3StorageBackend(
            bucket,
            prefix=config.get("UPLOAD_S3_PREFIX") or "feedback/",
            region_name=config.get("UPLOAD_S3_REGION") or "us-east-1",
            public_base_url=config.get("UPLOAD_PUBLIC_BASE_URL") or "",
        )
    return LocalStorageBackend(config["UPLOAD_FOLDER"])


def ext_from_mime(mime: str) -> str:
    return _MIME_EXT.get((mime or "").lower(), "")


def _safe_ext(mime: str, filename: Optional[str]) -> str:
    ext = ext_from_mime(mime)
    if not ext and filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1]
    ext = re.sub(r"[^a-z0-9]", "", (ext or "").lower())[:8]
    return ext or "png"


def save_feedback_image(file, backend: Optional[StorageBackend] = None) -> str:
    """
    Validate an uploaded werkzeug ``FileStorage`` and store it under a random
    name. Returns the public URL.
    """
    if file is None or not getattr(file, "filename", None):
        raise UploadError("file is required")
    mime = (file.mimetype or "").lower()
    if not mime.startswith("image/"):
        raise UploadError("only image upload is supported")

    max_bytes = current_app.config["UPLOAD_MAX_BYTES"]
    data = file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadError(f"image too large (max {max_bytes // (1024 * 1024)}MB)", status_code=413)
    if not data:
        raise UploadError("file is empty")

    name = f"{uuid.uuid4()}.{_safe_ext(mime, file.filename)}"
    backend = backend or get_storage_backend(current_app.config)
    url = backend.save_file(data, name, mime)

    current_app.logger.info(
        "feedback_image_uploaded",
        extra={"event": "feedback_image_uploaded", "backend": type(backend).__name__, "bytes": len(data)},
    )
    return url


def local_upload_path(config, url: str) -> Optional[str]:
    """
    Map an app-relative URL (``/uploads/...``) to a file inside UPLOAD_FOLDER.
    Returns None when the path would escape that folder.
    """
    root = os.path.realpath(config["UPLOAD_FOLDER"])
    rel = url.lstrip("/")
    if rel.startswith("uploads/"):
        rel = rel[len("uploads/"):]
    full = os.path.realpath(os.path.join(root, rel))
    if not full.startswith(root + os.sep):
        return None
    return full
