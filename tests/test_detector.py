import base64
import json

import httpx
import pytest

from detector import DetectionClient
from errors import UpstreamError
from tests.utils import make_client, make_settings, signup, bearer, create_image_bytes, PREFIX

DETECT_URL = "https://detect.example/potholes/5"


def make_detector(tmp_path, handler, **overrides):
    settings = make_settings(tmp_path, detection_api_url=DETECT_URL, detection_api_key="k3y", **overrides)
    return DetectionClient(settings, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_detect_returns_highest_confidence_percentage(tmp_path):
    seen = {}

    def handler(request):
        seen["api_key"] = request.url.params["api_key"]
        seen["body"] = request.content
        return httpx.Response(200, json={"predictions": [{"confidence": 0.42}, {"confidence": 0.875}]})

    result = make_detector(tmp_path, handler).detect(b"img-bytes")
    assert result["detectionResultPercentage"] == 87.5
    assert result["detected"] is True
    assert len(result["predictions"]) == 2
    assert seen["api_key"] == "k3y"
    assert base64.b64decode(seen["body"]) == b"img-bytes"


def test_detect_below_threshold(tmp_path):
    def handler(request):
        return httpx.Response(200, json={"predictions": [{"confidence": 0.5}]})

    result = make_detector(tmp_path, handler).detect(b"img")
    assert result["detectionResultPercentage"] == 50.0
    assert result["detected"] is False


def test_detect_no_predictions(tmp_path):
    def handler(request):
        return httpx.Response(200, json={"predictions": []})

    result = make_detector(tmp_path, handler).detect(b"img")
    assert result == {"detected": False, "detectionResultPercentage": 0.0, "predictions": []}


def test_detect_upstream_failure(tmp_path):
    def handler(request):
        return httpx.Response(503, text="busy")

    with pytest.raises(UpstreamError):
        make_detector(tmp_path, handler).detect(b"img")


def test_detect_not_configured(tmp_path):
    with pytest.raises(UpstreamError):
        DetectionClient(make_settings(tmp_path)).detect(b"img")


def test_detect_endpoint(tmp_path):
    def handler(request):
        return httpx.Response(200, content=json.dumps({"predictions": [{"confidence": 0.91}]}))

    client, _ = make_client(tmp_path, detector=make_detector(tmp_path, handler))
    token = signup(client)
    files = {"image": ("p.jpg", create_image_bytes(), "image/jpeg")}
    resp = client.post(f"{PREFIX}/pothole/detect", files=files, headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["detected"] is True
    assert resp.json()["detectionResultPercentage"] == 91.0


def test_detect_endpoint_rejects_non_image(tmp_path):
    client, _ = make_client(tmp_path)
    token = signup(client)
    files = {"image": ("notes.txt", b"hello", "text/plain")}
    resp = client.post(f"{PREFIX}/pothole/detect", files=files, headers=bearer(token))
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidUploadError"
