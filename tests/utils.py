# tests/utils.py
import io
import os

from fastapi.testclient import TestClient
from PIL import Image

from app import create_app
from config import Settings

TEST_SECRET = "test-secret"
PREFIX = "/api/v1"


def make_settings(root, **overrides):
    values = dict(
        database_url=f"sqlite:///{os.path.join(str(root), 'test.db')}",
        jwt_secret=TEST_SECRET,
        upload_dir=os.path.join(str(root), "uploads"),
        bcrypt_rounds=4,
    )
    values.update(overrides)
    return Settings(**values)


def make_client(root, settings_overrides=None, **app_kwargs):
    app = create_app(make_settings(root, **(settings_overrides or {})), **app_kwargs)
    return TestClient(app), app


def create_image_bytes(fmt="JPEG"):
    img = Image.new("RGB", (20, 20), color=(0, 255, 0))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    buf.seek(0)
    return buf.getvalue()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, name="Alice", email="a@x.com", password="secret123"):
    resp = client.post(f"{PREFIX}/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["token"]


def upload(client, token, image=None, content_type="image/jpeg", **fields):
    data = {"latitude": "12.9", "longitude": "77.6", "detectionResultPercentage": "82.5"}
    data.update(fields)
    data = {k: v for k, v in data.items() if v is not None}
    files = {"image": ("pothole.jpg", image if image is not None else create_image_bytes(), content_type)}
    return client.post(f"{PREFIX}/pothole/upload", data=data, files=files, headers=bearer(token))
