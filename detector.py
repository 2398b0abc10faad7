# detector.py
import base64
import logging
from typing import Optional

import httpx

from config import Settings
from errors import UpstreamError

logger = logging.getLogger(__name__)


class DetectionClient:
    """Client for the hosted pothole classifier.

    The model replies with ``{"predictions": [{"confidence": 0.87, ...}, ...]}``
    where confidences are 0..1 fractions; callers get a 0..100 percentage.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.url = settings.detection_api_url
        self.api_key = settings.detection_api_key
        self.threshold = settings.detection_threshold
        self.timeout = settings.http_timeout
        self._client = client

    def _post(self, body: str) -> httpx.Response:
        kwargs = {
            "params": {"api_key": self.api_key},
            "content": body,
            "headers": {"Content-Type": "application/x-www-form-urlencoded"},
        }
        if self._client is not None:
            return self._client.post(self.url, **kwargs)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.url, **kwargs)

    def detect(self, image: bytes) -> dict:
        if not self.url or not self.api_key:
            raise UpstreamError("Detection service is not configured")

        logger.info(f"Detection: sending {len(image)} bytes to classifier")
        try:
            r = self._post(base64.b64encode(image).decode("ascii"))
            r.raise_for_status()
            predictions = r.json().get("predictions") or []
        except httpx.HTTPError as e:
            logger.error(f"Detection request failed: {e}")
            raise UpstreamError("Detection service failed")
        except ValueError as e:
            logger.error(f"Detection response was not JSON: {e}")
            raise UpstreamError("Detection service returned an invalid response")

        confidences = [float(p.get("confidence") or 0) for p in predictions]
        percentage = max(confidences) * 100 if confidences else 0.0
        return {
            "detected": percentage > self.threshold,
            "detectionResultPercentage": round(percentage, 2),
            "predictions": predictions,
        }
