"""HTTP client cho backend, dùng chung cho mọi panel."""

import base64
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from config.settings import settings

BACKEND_URL = settings.BACKEND_URL.rstrip("/")


class BackendError(Exception):
    """Lỗi hiển thị được cho người dùng (message lấy từ backend nếu có)."""


def _headers(api_key: Optional[str]) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if api_key and api_key.strip():
        headers["X-Api-Key"] = api_key.strip()
    return headers


def _check(resp: requests.Response) -> Dict[str, Any]:
    if resp.ok:
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"Backend returned an invalid response (HTTP {resp.status_code})") from e
    try:
        detail = resp.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, list):
        # lỗi validate của FastAPI
        detail = "; ".join(str(d.get("msg", d)) for d in detail)
    raise BackendError(detail or f"Backend returned HTTP {resp.status_code}")


def _field(data: Dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise BackendError(f"Backend response is missing '{key}'") from e


def _post(path: str, api_key: Optional[str], payload: Optional[dict] = None, timeout: float = 180):
    try:
        resp = requests.post(
            f"{BACKEND_URL}{path}", json=payload, headers=_headers(api_key), timeout=timeout
        )
    except requests.RequestException as e:
        raise BackendError(f"Cannot reach backend: {e}") from e
    return _check(resp)


def call_generate(prompt: str, api_key: Optional[str], aspect_ratio: Optional[str] = None) -> str:
    """POST /images (generate) -> data URI"""
    payload = {"kind": "generate", "prompt": prompt}
    if aspect_ratio:
        payload["aspect_ratio"] = aspect_ratio
    return _field(_post("/images", api_key, payload), "image_uri")


def call_edit(prompt: str, image_b64: str, mime_type: str, api_key: Optional[str]) -> str:
    """POST /images (edit) -> data URI"""
    payload = {
        "kind": "edit",
        "prompt": prompt,
        "source_image": {"data": image_b64, "mime_type": mime_type},
    }
    return _field(_post("/images", api_key, payload), "image_uri")


def call_storyboard(concept: str, api_key: Optional[str]) -> List[str]:
    return _field(_post("/storyboard", api_key, {"concept": concept}), "images")


def call_gallery(api_key: Optional[str]) -> Dict[str, List[str]]:
    """POST /gallery -> {"prompts": [...], "images": [...]}"""
    return _post("/gallery", api_key)


def submit_video(prompt: str, api_key: Optional[str]) -> str:
    """POST /videos -> job_id"""
    return _field(_post("/videos", api_key, {"kind": "video", "prompt": prompt}, timeout=60), "job_id")


def poll_result(
    job_id: str,
    poll_interval: float = 5.0,
    timeout_sec: Optional[float] = 1200.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Poll GET /result/{job_id} cho đến khi done/failed"""
    start = time.time()
    while True:
        try:
            resp = requests.get(f"{BACKEND_URL}/result/{job_id}", timeout=10)
        except requests.RequestException as e:
            raise BackendError(f"Cannot reach backend: {e}") from e
        data = _check(resp)

        if data.get("status") in ("done", "failed"):
            return data

        if timeout_sec is not None and time.time() - start > timeout_sec:
            raise BackendError("Timed out waiting for the video")

        sleep(poll_interval)


def download_media(video_url: str) -> bytes:
    url = video_url if video_url.startswith("http") else f"{BACKEND_URL}{video_url}"
    try:
        resp = requests.get(url, timeout=120)
    except requests.RequestException as e:
        raise BackendError(f"Cannot download video: {e}") from e
    if not resp.ok:
        _check(resp)
    return resp.content


def generate_video(prompt: str, api_key: Optional[str], **poll_kwargs) -> bytes:
    """Submit job -> poll -> tải video. Job failed -> BackendError."""
    job_id = submit_video(prompt, api_key)
    result = poll_result(job_id, **poll_kwargs)
    if result.get("status") != "done" or not result.get("video_url"):
        raise BackendError(result.get("error_message") or "Failed to generate video")
    return download_media(result["video_url"])


def data_uri_to_bytes(uri: str) -> bytes:
    _, _, encoded = uri.partition(";base64,")
    return base64.b64decode(encoded)
