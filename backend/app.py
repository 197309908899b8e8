# backend/app.py

import logging
from typing import Annotated, Optional, Union

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from config.settings import settings
from . import adapter
from .errors import GenerationError
from .jobs import JobStore
from .model import (
    BatchResult,
    EditImageRequest,
    GenerateImageRequest,
    ImageResult,
    JobResult,
    StoryboardRequest,
    VideoJobResponse,
    VideoRequest,
)
from .request_builder import gallery_prompts, storyboard_prompts

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="NanoBanana Studio Service")

# Job video chỉ nằm trong RAM của process này
jobs = JobStore()

# generate | edit, phân biệt bằng field "kind"
ImageRequest = Annotated[
    Union[GenerateImageRequest, EditImageRequest],
    Body(discriminator="kind"),
]


def get_credential(x_api_key: Optional[str] = Header(default=None)) -> Optional[str]:
    """Key gửi kèm request, không có thì dùng key cấu hình trong .env"""
    return (x_api_key or "").strip() or settings.GEMINI_API_KEY


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/images", response_model=ImageResult)
async def create_image(req: ImageRequest, credential: Optional[str] = Depends(get_credential)):
    """Generate hoặc edit 1 ảnh, tùy theo req.kind."""
    image_uri = await adapter.dispatch(req, credential)
    return ImageResult(image_uri=image_uri)


@app.post("/storyboard", response_model=BatchResult)
async def create_storyboard(
    req: StoryboardRequest, credential: Optional[str] = Depends(get_credential)
):
    images = await adapter.generate_storyboard(req.concept, credential)
    return BatchResult(prompts=storyboard_prompts(req.concept), images=images)


@app.post("/gallery", response_model=BatchResult)
async def create_gallery(credential: Optional[str] = Depends(get_credential)):
    images = await adapter.generate_gallery(credential)
    return BatchResult(prompts=gallery_prompts(), images=images)


@app.post("/videos", response_model=VideoJobResponse)
async def create_video(req: VideoRequest, credential: Optional[str] = Depends(get_credential)):
    job = jobs.start(req, credential)
    return VideoJobResponse(job_id=job.job_id, status=job.status)


@app.get("/result/{job_id}", response_model=JobResult)
async def get_result(job_id: str):
    """
    Trả về trạng thái job + video_url (nếu xong).
    """
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobResult(
        job_id=job.job_id,
        status=job.status,
        video_url=f"/media/{job.job_id}" if job.status == "done" else None,
        error_message=job.error_message,
        attempts=job.attempts,
    )


@app.get("/media/{job_id}")
async def get_media(job_id: str):
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.status != "done" or not job.video:
        raise HTTPException(status_code=409, detail=f"Video is not ready (status={job.status})")
    return Response(content=job.video, media_type="video/mp4")
