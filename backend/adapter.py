# backend/adapter.py
"""
Adapter giữa input của UI và model Gemini.

Mỗi loại request (generate / edit / video) có 1 hàm riêng; `dispatch` chọn hàm
theo type của request, không rẽ nhánh theo chuỗi mode. Credential luôn được
truyền vào tường minh.
"""

import asyncio
import logging
from typing import List, Optional, Union

from config.settings import settings

from . import genai_client
from .errors import InvalidPrompt, MissingSourceImage, NoPayloadInResponse
from .model import (
    EditImageRequest,
    GenerateImageRequest,
    GenerationRequest,
    SourceImage,
    VideoRequest,
)
from .poller import PollPolicy, VideoJob, run_video_job
from .request_builder import (
    build_edit_contents,
    build_generate_config,
    build_generate_contents,
    gallery_prompts,
    storyboard_prompts,
)
from .utils import to_data_uri

logger = logging.getLogger(__name__)


def _require_prompt(prompt: Optional[str]) -> str:
    if not prompt or not prompt.strip():
        raise InvalidPrompt()
    return prompt


def _image_uri_from(response, action: str) -> str:
    payload = genai_client.extract_inline_image(response)
    if not payload:
        logger.warning("No inline image payload in %s response", action)
        raise NoPayloadInResponse(f"Failed to {action} image")
    return to_data_uri(payload)


async def generate_image(
    prompt: str,
    credential: Optional[str],
    aspect_ratio: Optional[str] = None,
) -> str:
    """Text -> ảnh. Trả về data:image/png;base64,..."""
    prompt = _require_prompt(prompt)
    client = genai_client.make_client(credential)
    response = await genai_client.request_content(
        client,
        settings.IMAGE_MODEL,
        build_generate_contents(prompt),
        build_generate_config(aspect_ratio or settings.IMAGE_ASPECT_RATIO),
    )
    return _image_uri_from(response, "generate")


async def edit_image(
    prompt: str,
    source_image: Optional[SourceImage],
    credential: Optional[str],
) -> str:
    """Ảnh gốc + chỉ dẫn -> ảnh mới. Ảnh gốc là bắt buộc."""
    if source_image is None or not source_image.data:
        raise MissingSourceImage()
    prompt = _require_prompt(prompt)
    contents = build_edit_contents(prompt, source_image)
    client = genai_client.make_client(credential)
    response = await genai_client.request_content(client, settings.IMAGE_MODEL, contents)
    return _image_uri_from(response, "edit")


async def generate_batch(prompts: List[str], credential: Optional[str]) -> List[str]:
    """
    Chạy song song các request generate.
    Có 1 request lỗi -> cả batch lỗi, không trả kết quả dở dang.
    Các request còn đang chạy bị hủy ngay.
    """
    for p in prompts:
        _require_prompt(p)
    genai_client.make_client(credential)  # báo thiếu key trước khi gọi mạng

    tasks = [asyncio.ensure_future(generate_image(p, credential)) for p in prompts]
    try:
        return list(await asyncio.gather(*tasks))
    except Exception as e:
        pending = [t for t in tasks if not t.done()]
        for t in pending:
            t.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "Batch of %d image(s) failed, cancelled %d pending: %s", len(prompts), len(pending), e
        )
        raise


async def generate_storyboard(concept: str, credential: Optional[str]) -> List[str]:
    return await generate_batch(storyboard_prompts(_require_prompt(concept)), credential)


async def generate_gallery(credential: Optional[str]) -> List[str]:
    return await generate_batch(gallery_prompts(), credential)


async def generate_video(
    request: VideoRequest,
    credential: Optional[str],
    policy: Optional[PollPolicy] = None,
    job: Optional[VideoJob] = None,
) -> VideoJob:
    _require_prompt(request.prompt)
    client = genai_client.make_client(credential)
    return await run_video_job(
        client,
        request,
        credential,
        policy=policy or PollPolicy.from_settings(),
        job=job,
    )


async def _dispatch_generate(request: GenerateImageRequest, credential):
    return await generate_image(request.prompt, credential, request.aspect_ratio)


async def _dispatch_edit(request: EditImageRequest, credential):
    return await edit_image(request.prompt, request.source_image, credential)


async def _dispatch_video(request: VideoRequest, credential):
    return await generate_video(request, credential)


_HANDLERS = {
    GenerateImageRequest: _dispatch_generate,
    EditImageRequest: _dispatch_edit,
    VideoRequest: _dispatch_video,
}


async def dispatch(
    request: GenerationRequest,
    credential: Optional[str],
) -> Union[str, VideoJob]:
    """
    Chọn thao tác theo type của request.
    Ảnh -> data URI, video -> VideoJob đã xong.
    """
    handler = _HANDLERS.get(type(request))
    if handler is None:
        raise TypeError(f"Unsupported request type: {type(request).__name__}")
    return await handler(request, credential)
