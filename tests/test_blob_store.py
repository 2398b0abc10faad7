import os
import unittest
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from blob_store import LocalBlobStore, S3BlobStore, make_blob_store, guess_extension
from config import Settings
from errors import UpstreamError


def test_local_put_and_delete(tmp_path):
    store = LocalBlobStore(str(tmp_path / "uploads"), "https://api.example")
    url = store.put("u1/reports/a.jpg", b"\xFF\xD8\xFF\xD9", "image/jpeg")
    assert url == "https://api.example/uploads/u1/reports/a.jpg"
    path = tmp_path / "uploads" / "u1" / "reports" / "a.jpg"
    assert path.read_bytes() == b"\xFF\xD8\xFF\xD9"
    assert store.delete("u1/reports/a.jpg") is True
    assert not path.exists()


def test_local_refuses_escaping_keys(tmp_path):
    store = LocalBlobStore(str(tmp_path / "uploads"))
    with pytest.raises(UpstreamError):
        store.put("../outside.jpg", b"x")


def test_guess_extension():
    assert guess_extension("pothole.PNG", "image/png") == ".png"
    assert guess_extension(None, "image/png") == ".png"
    assert guess_extension("", None) == ".jpg"


def test_make_blob_store_selects_backend(tmp_path):
    assert isinstance(make_blob_store(Settings(upload_dir=str(tmp_path))), LocalBlobStore)
    with pytest.raises(ValueError):
        make_blob_store(Settings(blob_backend="ftp"))
    with pytest.raises(ValueError):
        make_blob_store(Settings(blob_backend="s3"))


class TestS3BlobStore(unittest.TestCase):
    def setUp(self):
        self.s3 = Mock()
        self.settings = Settings(blob_backend="s3", aws_s3_bucket="potholes", aws_region="ap-south-1")
        self.store = S3BlobStore(self.settings, client=self.s3)

    def test_put_returns_virtual_host_url(self):
        url = self.store.put("u1/reports/a.jpg", b"data", "image/jpeg")
        self.assertEqual(url, "https://potholes.s3.ap-south-1.amazonaws.com/u1/reports/a.jpg")
        self.s3.put_object.assert_called_once_with(
            Bucket="potholes", Key="u1/reports/a.jpg", Body=b"data", ContentType="image/jpeg"
        )

    def test_put_guesses_content_type(self):
        self.store.put("u1/reports/a.png", b"data")
        self.assertEqual(self.s3.put_object.call_args.kwargs["ContentType"], "image/png")

    def test_url_with_custom_endpoint(self):
        settings = Settings(blob_backend="s3", aws_s3_bucket="potholes", aws_s3_endpoint_url="http://minio:9000/")
        store = S3BlobStore(settings, client=self.s3)
        self.assertEqual(store.url_for("k.jpg"), "http://minio:9000/potholes/k.jpg")

    def test_url_with_public_base(self):
        settings = Settings(blob_backend="s3", aws_s3_bucket="potholes", aws_s3_public_base_url="https://cdn.example/")
        store = S3BlobStore(settings, client=self.s3)
        self.assertEqual(store.url_for("k.jpg"), "https://cdn.example/k.jpg")

    def test_put_client_error_is_upstream_error(self):
        self.s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "PutObject"
        )
        with self.assertRaises(UpstreamError):
            self.store.put("k.jpg", b"data", "image/jpeg")

    def test_put_without_credentials(self):
        self.s3.put_object.side_effect = NoCredentialsError()
        with self.assertRaises(UpstreamError):
            self.store.put("k.jpg", b"data", "image/jpeg")

    def test_delete_failure_returns_false(self):
        self.s3.delete_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "gone"}}, "DeleteObject"
        )
        self.assertFalse(self.store.delete("k.jpg"))
        self.s3.delete_object.side_effect = None
        self.assertTrue(self.store.delete("k.jpg"))


def test_local_store_creates_root(tmp_path):
    root = tmp_path / "nested" / "uploads"
    LocalBlobStore(str(root))
    assert os.path.isdir(root)
