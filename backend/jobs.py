# backend/jobs.py

import asyncio
import logging
from typing import Dict, Optional

from . import adapter, genai_client
from .errors import GenerationError, InvalidPrompt
from .model import VideoRequest
from .poller import PollPolicy, VideoJob

logger = logging.getLogger(__name__)

MAX_FINISHED_JOBS = 20  # giữ video của tối đa 20 job đã xong trong RAM


class JobStore:
    """
    Bảng job video trong RAM, chỉ sống cùng process backend.
    Mỗi job chạy trong 1 asyncio task riêng.
    """

    def __init__(self, policy: Optional[PollPolicy] = None):
        self.policy = policy
        self._jobs: Dict[str, VideoJob] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def get(self, job_id: str) -> Optional[VideoJob]:
        return self._jobs.get(job_id)

    def start(self, request: VideoRequest, credential: Optional[str]) -> VideoJob:
        # Kiểm tra điều kiện trước khi tạo job để lỗi trả thẳng về caller
        if not request.prompt or not request.prompt.strip():
            raise InvalidPrompt()
        genai_client.make_client(credential)

        job = VideoJob(prompt=request.prompt)
        self._jobs[job.job_id] = job
        self._evict_finished()

        task = asyncio.create_task(self._process(job, request, credential))
        self._tasks[job.job_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(job.job_id, None))
        logger.info("Started video job %s", job.job_id)
        return job

    async def _process(self, job: VideoJob, request: VideoRequest, credential: str) -> None:
        try:
            await adapter.generate_video(request, credential, policy=self.policy, job=job)
        except GenerationError:
            # Lỗi đã được ghi vào job.status / job.error_message cho GET /result
            logger.info("Video job %s ended with status=%s", job.job_id, job.status)

    def _evict_finished(self) -> None:
        finished = [j for j in self._jobs.values() if j.finished]
        if len(finished) <= MAX_FINISHED_JOBS:
            return
        finished.sort(key=lambda j: j.created_at)
        for old in finished[: len(finished) - MAX_FINISHED_JOBS]:
            self._jobs.pop(old.job_id, None)
