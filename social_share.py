# social_share.py
import logging
from typing import Optional

import httpx

from config import Settings

logger = logging.getLogger(__name__)


def compose_message(report: dict) -> str:
    location = report.get("location") or {}
    where = location.get("address") or f"{location.get('latitude')}, {location.get('longitude')}"
    confidence = float(report.get("detectionResultPercentage") or 0)
    return f"Pothole reported at {where} ({confidence:.2f}% confidence). #potholes"


class SocialPublisher:
    """Best-effort publisher that posts report summaries to a social feed webhook.

    ``publish`` never raises: it is meant to run as a background task after
    the report has been committed, so failures are only logged.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.url = settings.social_webhook_url
        self.token = settings.social_webhook_token
        self.timeout = settings.http_timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def _post(self, payload: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        if self._client is not None:
            return self._client.post(self.url, json=payload, headers=headers)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.url, json=payload, headers=headers)

    def publish(self, report: dict) -> bool:
        if not self.enabled:
            logger.info(f"Social share skipped for report {report.get('id')}: no webhook configured")
            return False
        payload = {
            "text": compose_message(report),
            "imageUrl": report.get("imageUrl"),
            "location": (report.get("location") or {}).get("address"),
            "confidence": f"{float(report.get('detectionResultPercentage') or 0):.2f}",
        }
        try:
            r = self._post(payload)
            r.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Social share failed for report {report.get('id')}: {e}")
            return False
        except Exception as e:
            logger.exception(f"Social share failed (unexpected) for report {report.get('id')}: {e}")
            return False
        logger.info(f"Shared report {report.get('id')} to social feed")
        return True
