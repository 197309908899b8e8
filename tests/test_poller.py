"""Video job poller tests."""

import asyncio

import httpx
import pytest

from backend import adapter, genai_client
from backend.errors import JobFailure, MissingCredential, RemoteCallFailure
from backend.model import VideoRequest
from backend.poller import PollPolicy, VideoJob, run_video_job

from conftest import finished_operation, pending_operation


class _Sleeps:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _run_job(fake_genai, policy=None, sleeps=None, job=None):
    client = fake_genai.Client(api_key="X")
    return asyncio.run(
        run_video_job(
            client,
            VideoRequest(prompt="A phone rotating in a neon city"),
            "X",
            policy=policy or PollPolicy(interval=10.0),
            job=job,
            sleep=sleeps or _Sleeps(),
        )
    )


def test_polls_until_done_then_downloads(fake_genai, fake_download):
    fake_genai.operations = [pending_operation(), pending_operation(), finished_operation()]
    sleeps = _Sleeps()

    job = _run_job(fake_genai, sleeps=sleeps)

    assert job.status == "done"
    assert job.attempts == 3
    assert sleeps.delays == [10.0, 10.0, 10.0]
    assert job.result_uri.endswith(":download")
    assert job.video.startswith(b"\x00\x00\x00")
    assert fake_download == [{"uri": job.result_uri, "api_key": "X"}]

    submitted = fake_genai.video_calls[0]
    assert submitted["model"] == "veo-3.1-fast-generate-preview"
    assert submitted["config"].resolution == "720p"
    assert submitted["config"].aspect_ratio == "16:9"
    assert submitted["config"].number_of_videos == 1


def test_already_done_operation_skips_polling(fake_genai, fake_download):
    fake_genai.submit_result = finished_operation()
    sleeps = _Sleeps()

    job = _run_job(fake_genai, sleeps=sleeps)

    assert job.status == "done"
    assert job.attempts == 0
    assert sleeps.delays == []


def test_done_without_uri_is_job_failure(fake_genai, fake_download):
    fake_genai.operations = [finished_operation(uri=None)]
    job = VideoJob(prompt="x")

    with pytest.raises(JobFailure):
        _run_job(fake_genai, job=job)

    assert job.status == "failed"
    assert job.result_uri is None
    assert fake_download == []


def test_operation_error_is_job_failure(fake_genai, fake_download):
    fake_genai.operations = [finished_operation(uri=None, error={"code": 3, "message": "unsafe prompt"})]
    job = VideoJob(prompt="x")

    with pytest.raises(JobFailure, match="unsafe prompt"):
        _run_job(fake_genai, job=job)
    assert job.error_message == "Video generation failed: unsafe prompt"


def test_status_error_is_not_retried(fake_genai, fake_download):
    fake_genai.operations = [pending_operation(), RuntimeError("503 unavailable"), finished_operation()]
    job = VideoJob(prompt="x")

    with pytest.raises(RemoteCallFailure):
        _run_job(fake_genai, job=job)

    assert job.status == "failed"
    assert fake_genai.status_checks == 2


def test_max_attempts_bounds_the_wait(fake_genai, fake_download):
    fake_genai.operations = [pending_operation() for _ in range(5)]
    job = VideoJob(prompt="x")

    with pytest.raises(JobFailure, match="2 status check"):
        _run_job(fake_genai, policy=PollPolicy(interval=1.0, max_attempts=2), job=job)

    assert job.attempts == 2
    assert job.status == "failed"


def test_timeout_bounds_the_wait(fake_genai, fake_download):
    fake_genai.operations = [pending_operation() for _ in range(5)]
    ticks = iter([0.0, 0.0, 5.0, 11.0, 20.0])
    client = fake_genai.Client(api_key="X")

    with pytest.raises(JobFailure):
        asyncio.run(
            run_video_job(
                client,
                VideoRequest(prompt="x"),
                "X",
                policy=PollPolicy(interval=5.0, timeout=10.0),
                sleep=_Sleeps(),
                clock=lambda: next(ticks),
            )
        )
    assert fake_genai.status_checks == 2


def test_poll_policy_exhausted():
    assert not PollPolicy().exhausted(10_000, 10_000.0)
    assert PollPolicy(max_attempts=3).exhausted(3, 0.0)
    assert not PollPolicy(max_attempts=3).exhausted(2, 0.0)
    assert PollPolicy(timeout=60.0).exhausted(0, 60.0)


def test_generate_video_requires_credential(fake_genai):
    with pytest.raises(MissingCredential):
        asyncio.run(adapter.generate_video(VideoRequest(prompt="x"), None))
    assert fake_genai.network_calls == 0


def test_download_video_sends_api_key_and_follows_redirect():
    seen = []

    def handler(request):
        seen.append(request)
        if request.url.host == "generativelanguage.example":
            return httpx.Response(302, headers={"location": "https://storage.example/video.mp4"})
        return httpx.Response(200, content=b"mp4-bytes")

    data = asyncio.run(
        genai_client.download_video(
            "https://generativelanguage.example/files/abc:download",
            "secret",
            transport=httpx.MockTransport(handler),
        )
    )

    assert data == b"mp4-bytes"
    assert seen[0].headers["x-goog-api-key"] == "secret"
    assert len(seen) == 2


def test_download_video_http_error_is_remote_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(403))

    with pytest.raises(RemoteCallFailure):
        asyncio.run(genai_client.download_video("https://x.example/v", "k", transport=transport))
