# config.py
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_PROFILE_PICTURE = "https://www.kindpng.com/picc/m/252-2524695_dummy-profile-image-jpg-hd-png-download.png"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _env_list(name: str, default):
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./potholes.db"
    jwt_secret: Optional[str] = None
    api_prefix: str = "/api/v1"
    cors_origins: Tuple[str, ...] = ("*",)

    blob_backend: str = "local"  # "local" | "s3"
    upload_dir: str = "uploads"
    public_base_url: str = ""
    max_upload_bytes: int = 5 * 1024 * 1024

    aws_region: Optional[str] = None
    aws_s3_bucket: Optional[str] = None
    aws_profile: Optional[str] = None
    aws_s3_endpoint_url: Optional[str] = None
    aws_s3_addressing_style: str = "path"
    aws_s3_public_base_url: Optional[str] = None

    social_webhook_url: Optional[str] = None
    social_webhook_token: Optional[str] = None

    detection_api_url: Optional[str] = None
    detection_api_key: Optional[str] = None
    detection_threshold: float = 50.0

    http_timeout: float = 60.0
    bcrypt_rounds: int = 10
    default_profile_picture: str = DEFAULT_PROFILE_PICTURE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and ``.env`` if present)."""
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET") or None,
            api_prefix=os.getenv("API_PREFIX", cls.api_prefix).rstrip("/"),
            cors_origins=_env_list("CORS_ORIGINS", cls.cors_origins),
            blob_backend=os.getenv("BLOB_BACKEND", cls.blob_backend).lower(),
            upload_dir=os.getenv("UPLOAD_DIR", cls.upload_dir),
            public_base_url=os.getenv("PUBLIC_BASE_URL", cls.public_base_url).rstrip("/"),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", cls.max_upload_bytes),
            aws_region=os.getenv("AWS_REGION"),
            aws_s3_bucket=os.getenv("AWS_S3_BUCKET"),
            aws_profile=os.getenv("AWS_PROFILE"),
            aws_s3_endpoint_url=os.getenv("AWS_S3_ENDPOINT_URL"),
            aws_s3_addressing_style=os.getenv("AWS_S3_ADDRESSING_STYLE", cls.aws_s3_addressing_style),
            aws_s3_public_base_url=os.getenv("AWS_S3_PUBLIC_BASE_URL"),
            social_webhook_url=os.getenv("SOCIAL_WEBHOOK_URL") or None,
            social_webhook_token=os.getenv("SOCIAL_WEBHOOK_TOKEN") or None,
            detection_api_url=os.getenv("DETECTION_API_URL") or None,
            detection_api_key=os.getenv("DETECTION_API_KEY") or None,
            detection_threshold=_env_float("DETECTION_THRESHOLD", cls.detection_threshold),
            http_timeout=_env_float("HTTP_TIMEOUT", cls.http_timeout),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", cls.bcrypt_rounds),
            default_profile_picture=os.getenv("DEFAULT_PROFILE_PICTURE", cls.default_profile_picture),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
