# blob_store.py
import os
import logging
import mimetypes
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError, NoCredentialsError, EndpointConnectionError, ProfileNotFound
)

from config import Settings
from errors import UpstreamError

logger = logging.getLogger(__name__)


def guess_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext:
        return ext
    return mimetypes.guess_extension(content_type or "") or ".jpg"


class LocalBlobStore:
    """Keeps images on local disk; the app serves them under ``/uploads``."""

    def __init__(self, root: str, public_base_url: str = ""):
        self.root = root
        self.public_base_url = public_base_url
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(os.path.abspath(self.root) + os.sep):
            raise UpstreamError(f"Refusing to write outside the upload directory: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Local upload failed for key='{key}': {e}")
            raise UpstreamError("Error storing image")
        logger.info(f"Stored {len(data)} bytes -> {path}")
        return f"{self.public_base_url}/uploads/{key}"

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            if os.path.exists(path):
                os.remove(path)
            return True
        except OSError as e:
            logger.error(f"Local delete failed for key='{key}': {e}")
            return False


def _make_session(settings: Settings):
    if settings.aws_profile:
        try:
            return boto3.Session(profile_name=settings.aws_profile, region_name=settings.aws_region)
        except ProfileNotFound:
            logger.warning(
                "AWS profile '%s' not found; falling back to env/instance credentials.",
                settings.aws_profile,
            )
    return boto3.Session(region_name=settings.aws_region)


def make_s3_client(settings: Settings):
    cfg = Config(s3={"addressing_style": settings.aws_s3_addressing_style})
    client = _make_session(settings).client("s3", endpoint_url=settings.aws_s3_endpoint_url, config=cfg)
    logger.info(f"S3 client created (bucket={settings.aws_s3_bucket}, region={settings.aws_region})")
    return client


class S3BlobStore:
    def __init__(self, settings: Settings, client=None):
        if not settings.aws_s3_bucket:
            raise ValueError("AWS_S3_BUCKET must be set when BLOB_BACKEND=s3")
        self.bucket = settings.aws_s3_bucket
        self.settings = settings
        self._s3 = client or make_s3_client(settings)

    def url_for(self, key: str) -> str:
        s = self.settings
        if s.aws_s3_public_base_url:
            return f"{s.aws_s3_public_base_url.rstrip('/')}/{key}"
        if s.aws_s3_endpoint_url:
            return f"{s.aws_s3_endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        region = s.aws_region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        if not content_type:
            content_type, _ = mimetypes.guess_type(key)
        logger.info(f"S3: uploading {len(data)} bytes -> s3://{self.bucket}/{key}")
        try:
            self._s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except NoCredentialsError:
            logger.error("S3 upload failed: No AWS credentials available")
            raise UpstreamError("Error storing image")
        except EndpointConnectionError as e:
            logger.error(f"S3 upload failed: Endpoint connection error: {e}")
            raise UpstreamError("Error storing image")
        except ClientError as e:
            err = e.response.get("Error", {})
            logger.error(
                f"S3 upload failed for key='{key}' bucket='{self.bucket}': "
                f"{err.get('Code')} - {err.get('Message')}"
            )
            raise UpstreamError("Error storing image")
        return self.url_for(key)

    def delete(self, key: str) -> bool:
        try:
            self._s3.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"S3: deleted s3://{self.bucket}/{key}")
            return True
        except NoCredentialsError:
            logger.error("S3 delete failed: No AWS credentials available")
            return False
        except EndpointConnectionError as e:
            logger.error(f"S3 delete failed: Endpoint connection error: {e}")
            return False
        except ClientError as e:
            err = e.response.get("Error", {})
            logger.error(
                f"S3 delete failed for key='{key}' bucket='{self.bucket}': "
                f"{err.get('Code')} - {err.get('Message')}"
            )
            return False


def make_blob_store(settings: Settings):
    if settings.blob_backend == "s3":
        return S3BlobStore(settings)
    if settings.blob_backend != "local":
        raise ValueError(f"Unknown BLOB_BACKEND '{settings.blob_backend}'")
    return LocalBlobStore(settings.upload_dir, settings.public_base_url)
