import logging
from typing import Any, List, Optional, Union

import httpx
from google import genai
from google.genai import types

from config.settings import settings

from .errors import MissingCredential, RemoteCallFailure

logger = logging.getLogger(__name__)


def make_client(api_key: Optional[str]) -> genai.Client:
    """
    Tạo client Gemini cho đúng credential của request.
    Thiếu key -> báo lỗi ngay, chưa gọi mạng.
    """
    if not api_key or not api_key.strip():
        raise MissingCredential()
    return genai.Client(api_key=api_key.strip())


async def request_content(
    client: genai.Client,
    model: str,
    contents: List[types.Part],
    config: Optional[types.GenerateContentConfig] = None,
) -> Any:
    """Gửi 1 request generate_content (text -> ảnh hoặc ảnh + text -> ảnh)."""
    logger.info("Calling %s with %d content part(s)", model, len(contents))
    try:
        return await client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )
    except Exception as e:
        logger.warning("generate_content on %s failed: %s", model, e)
        raise RemoteCallFailure(f"Image request failed: {e}") from e


def extract_inline_image(response: Any) -> Optional[Union[bytes, str]]:
    """
    Từ response, tìm part đầu tiên có inline_data.
    Trả về payload (bytes từ SDK, hoặc chuỗi base64) hoặc None.
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data is not None else None
            if data:
                return data
    return None


async def submit_video_job(
    client: genai.Client,
    model: str,
    prompt: str,
    config: types.GenerateVideosConfig,
) -> Any:
    """
    Gửi job tạo video sang Veo.
    Trả về operation dùng để query trạng thái.
    """
    try:
        operation = await client.aio.models.generate_videos(
            model=model,
            prompt=prompt,
            config=config,
        )
    except Exception as e:
        logger.warning("generate_videos on %s failed: %s", model, e)
        raise RemoteCallFailure(f"Video request failed: {e}") from e
    logger.info("Got video operation: %s", getattr(operation, "name", None))
    return operation


async def refresh_operation(client: genai.Client, operation: Any) -> Any:
    try:
        return await client.aio.operations.get(operation)
    except Exception as e:
        raise RemoteCallFailure(f"Failed to fetch video job status: {e}") from e


def extract_video_uri(operation: Any) -> Optional[str]:
    """
    Lấy URI video đầu tiên trong operation.response.generated_videos.
    """
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos:
        return None
    video = getattr(videos[0], "video", None)
    uri = getattr(video, "uri", None) if video is not None else None
    return uri or None


def extract_operation_error(operation: Any) -> Optional[str]:
    error = getattr(operation, "error", None)
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error)


async def download_video(
    uri: str,
    api_key: str,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    """
    Tải file video kết quả. URI của Gemini Files cần header x-goog-api-key
    và trả về redirect tới nơi lưu thật.
    """
    logger.info("Downloading video result")
    try:
        async with httpx.AsyncClient(
            timeout=timeout or settings.DOWNLOAD_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        ) as client:
            r = await client.get(uri, headers={"x-goog-api-key": api_key})
            r.raise_for_status()
            return r.content
    except httpx.HTTPError as e:
        raise RemoteCallFailure(f"Failed to download video: {e}") from e
