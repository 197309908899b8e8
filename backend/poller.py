# backend/poller.py

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from config.settings import settings

from . import genai_client
from .errors import GenerationError, JobFailure
from .model import JobStatus, VideoRequest
from .request_builder import build_video_config
from .utils import gen_job_id, get_timestamp_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """
    Nhịp poll trạng thái job video.
    max_attempts / timeout = None nghĩa là không giới hạn.
    """

    interval: float = 10.0
    max_attempts: Optional[int] = None
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "PollPolicy":
        return cls(
            interval=settings.POLL_INTERVAL,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
            timeout=settings.POLL_TIMEOUT,
        )

    def exhausted(self, attempts: int, elapsed: float) -> bool:
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return True
        if self.timeout is not None and elapsed >= self.timeout:
            return True
        return False


@dataclass
class VideoJob:
    prompt: str
    job_id: str = field(default_factory=gen_job_id)
    status: JobStatus = "submitted"
    operation: Any = None
    result_uri: Optional[str] = None
    attempts: int = 0
    error_message: Optional[str] = None
    video: Optional[bytes] = field(default=None, repr=False)
    created_at: int = field(default_factory=get_timestamp_ms)

    @property
    def finished(self) -> bool:
        return self.status in ("done", "failed")


async def run_video_job(
    client,
    request: VideoRequest,
    credential: str,
    policy: PollPolicy,
    job: Optional[VideoJob] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> VideoJob:
    """
    submitted -> polling -> done | failed.

    Chỉ chuyển sang done khi có URI kết quả và đã tải được video.
    Lỗi cứng (mạng, service, hết giới hạn poll) -> failed, không retry.
    """
    if job is None:
        job = VideoJob(prompt=request.prompt)

    try:
        config = build_video_config(
            request.resolution or settings.VIDEO_RESOLUTION,
            request.aspect_ratio or settings.VIDEO_ASPECT_RATIO,
        )
        operation = await genai_client.submit_video_job(
            client, settings.VIDEO_MODEL, request.prompt, config
        )
        job.operation = operation
        job.status = "polling"
        logger.info("Video job %s submitted, polling every %.1fs", job.job_id, policy.interval)

        started = clock()
        while not getattr(operation, "done", False):
            if policy.exhausted(job.attempts, clock() - started):
                raise JobFailure(
                    f"Video generation did not finish after {job.attempts} status check(s)"
                )
            await sleep(policy.interval)
            operation = await genai_client.refresh_operation(client, operation)
            job.operation = operation
            job.attempts += 1
            logger.debug(
                "Video job %s poll #%d done=%s",
                job.job_id, job.attempts, getattr(operation, "done", False),
            )

        error = genai_client.extract_operation_error(operation)
        if error:
            raise JobFailure(f"Video generation failed: {error}")

        uri = genai_client.extract_video_uri(operation)
        if not uri:
            raise JobFailure("Video generation completed but returned no video URI")
        job.result_uri = uri

        video = await genai_client.download_video(uri, credential.strip())
        if not video:
            raise JobFailure("Downloaded video is empty")
        job.video = video
        job.status = "done"
        logger.info("Video job %s done after %d poll(s)", job.job_id, job.attempts)
        return job

    except GenerationError as e:
        job.status = "failed"
        job.error_message = str(e)
        logger.warning("Video job %s failed: %s", job.job_id, e)
        raise
    except Exception as e:
        job.status = "failed"
        job.error_message = str(e)
        logger.exception("Video job %s failed unexpectedly", job.job_id)
        raise JobFailure(str(e)) from e
