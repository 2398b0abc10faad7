# report_service.py
import io
import math
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

import queries
from blob_store import guess_extension
from config import Settings
from errors import InvalidUploadError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_RECENT = 50


@dataclass
class ImageUpload:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


def read_upload(file, max_bytes: int) -> ImageUpload:
    """Reads an ``UploadFile`` while enforcing the image type and size limits."""
    if file is None:
        raise InvalidUploadError("No image file provided")
    content_type = (file.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise InvalidUploadError("Upload error: Not an image! Please upload an image.")
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise InvalidUploadError("Upload error: File too large")
    if not data:
        raise InvalidUploadError("Upload error: Empty file")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidUploadError("Upload error: Not an image! Please upload an image.")
    return ImageUpload(filename=file.filename, content_type=content_type, data=data)


def parse_number(raw, name: str, low: float, high: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' must be a number")
    if not math.isfinite(value) or not (low <= value <= high):
        raise ValidationError(f"'{name}' must be between {low:g} and {high:g}")
    return value


class ReportService:
    def __init__(self, settings: Settings, blob_store, publisher):
        self.settings = settings
        self.blob_store = blob_store
        self.publisher = publisher

    def submit_report(self, db: Session, user_id: str, image: ImageUpload, latitude, longitude,
                      detection_result_percentage, address=None):
        if latitude in (None, "") or longitude in (None, "") or detection_result_percentage in (None, ""):
            raise ValidationError("Location coordinates and detection result are required")
        lat = parse_number(latitude, "latitude", -90, 90)
        lng = parse_number(longitude, "longitude", -180, 180)
        pct = parse_number(detection_result_percentage, "detectionResultPercentage", 0, 100)

        if not queries.query_get_user(db, user_id):
            raise NotFoundError("User not found")

        key = f"{user_id}/reports/{uuid.uuid4()}{guess_extension(image.filename, image.content_type)}"
        image_url = self.blob_store.put(key, image.data, image.content_type)
        try:
            report = queries.query_create_report(db, user_id, image_url, lat, lng, address or "", pct)
        except Exception:
            db.rollback()
            self.blob_store.delete(key)
            raise
        logger.info(f"Report {report.id} created for user {user_id} ({pct:.2f}%)")
        return report

    def recent_reports(self, db: Session, user_id: str, limit: int = 5):
        if limit < 1 or limit > MAX_RECENT:
            raise ValidationError(f"'limit' must be between 1 and {MAX_RECENT}")
        return queries.query_get_reports_for_user(db, user_id, limit=limit)

    def get_report(self, db: Session, user_id: str, report_id: str):
        report = queries.query_get_user_report(db, report_id, user_id)
        if not report:
            raise NotFoundError("Report not found or unauthorized")
        return report

    def share(self, report: dict) -> None:
        """Background task body; the publisher logs and swallows its own failures."""
        self.publisher.publish(report)
