import io
import os

from roadboard.services import storage
from roadboard.services.storage import S3StorageBackend, ext_from_mime, local_upload_path

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, data=PNG, name="shot.png", mimetype="image/png"):
    return client.post(
        "/api/feedback/upload",
        data={"file": (io.BytesIO(data), name, mimetype)},
        content_type="multipart/form-data",
    )


def test_local_upload_round_trip(app, client, upload_root):
    resp = _upload(client)
    assert resp.status_code == 201
    url = resp.get_json()["url"]
    assert url.startswith("/uploads/feedback/") and url.endswith(".png")

    name = url.rsplit("/", 1)[-1]
    assert os.path.exists(os.path.join(str(upload_root), "feedback", name))

    served = client.get(url)
    assert served.status_code == 200
    assert served.data == PNG


def test_upload_requires_file(client):
    resp = client.post("/api/feedback/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "file is required"


def test_upload_rejects_non_images(client):
    resp = _upload(client, data=b"hello", name="notes.txt", mimetype="text/plain")
    assert resp.status_code == 400


def test_upload_rejects_oversized(app, client):
    limit = app.config["UPLOAD_MAX_BYTES"]
    resp = _upload(client, data=b"\x00" * (limit + 10))
    assert resp.status_code == 413


def test_ext_from_mime():
    assert ext_from_mime("image/jpeg") == "jpg"
    assert ext_from_mime("IMAGE/PNG") == "png"
    assert ext_from_mime("image/tiff") == ""


def test_local_upload_path_stays_inside_root(app, upload_root):
    with app.app_context():
        inside = local_upload_path(app.config, "/uploads/feedback/a.png")
        assert inside == os.path.join(os.path.realpath(str(upload_root)), "feedback", "a.png")
        assert local_upload_path(app.config, "/uploads/../../etc/passwd") is None


class FakeS3:
    def __init__(self):
        self.calls = []

    def put_object(self, **kwargs):
        self.calls.append(kwargs)


def test_s3_backend_puts_object_and_returns_public_url():
    fake = FakeS3()
    backend = S3StorageBackend("roadboard-uploads", prefix="feedback/", region_name="eu-west-1", client=fake)
    url = backend.save_file(b"data", "x.png", "image/png")
    assert url == "https://roadboard-uploads.s3.eu-west-1.amazonaws.com/feedback/x.png"
    assert fake.calls == [
        {"Bucket": "roadboard-uploads", "Key": "feedback/x.png", "Body": b"data", "ContentType": "image/png"}
    ]

    cdn = S3StorageBackend("b", public_base_url="https://cdn.example.com/", client=fake)
    assert cdn.save_file(b"d", "y.png", "image/png") == "https://cdn.example.com/feedback/y.png"


def test_upload_uses_s3_when_bucket_configured(app, client, monkeypatch):
    fake = FakeS3()
    monkeypatch.setitem(app.config, "UPLOAD_S3_BUCKET", "roadboard-uploads")
    monkeypatch.setattr(
        storage,
        "get_storage_backend",
        lambda config: S3StorageBackend(config["UPLOAD_S3_BUCKET"], client=fake),
    )
    resp = _upload(client)
    assert resp.status_code == 201
    assert resp.get_json()["url"].startswith("https://roadboard-uploads.s3.")
    assert len(fake.calls) == 1
