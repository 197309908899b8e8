"""Shared fakes for the Gemini SDK client."""

from types import SimpleNamespace

import pytest

from backend import genai_client as genai_client_module


def image_response(*payloads):
    """Response shaped like generate_content: one candidate, one part per payload."""
    parts = []
    for payload in payloads:
        if payload is None:
            parts.append(SimpleNamespace(inline_data=None, text="no image here"))
        else:
            parts.append(
                SimpleNamespace(
                    inline_data=SimpleNamespace(data=payload, mime_type="image/png"),
                    text=None,
                )
            )
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


def pending_operation(name="operations/video-1"):
    return SimpleNamespace(name=name, done=False, error=None, response=None)


def finished_operation(uri="https://generativelanguage.example/files/abc:download", error=None):
    videos = [] if uri is None else [SimpleNamespace(video=SimpleNamespace(uri=uri))]
    return SimpleNamespace(
        name="operations/video-1",
        done=True,
        error=error,
        response=SimpleNamespace(generated_videos=videos),
    )


class _FakeModels:
    def __init__(self, backend):
        self._backend = backend

    async def generate_content(self, model, contents, config=None):
        self._backend.content_calls.append({"model": model, "contents": contents, "config": config})
        result = self._backend.image_results.pop(0) if self._backend.image_results else self._backend.default_image
        if isinstance(result, Exception):
            raise result
        return result

    async def generate_videos(self, model, prompt, config=None):
        self._backend.video_calls.append({"model": model, "prompt": prompt, "config": config})
        if isinstance(self._backend.submit_result, Exception):
            raise self._backend.submit_result
        return self._backend.submit_result


class _FakeOperations:
    def __init__(self, backend):
        self._backend = backend

    async def get(self, operation):
        self._backend.status_checks += 1
        result = self._backend.operations.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeGenAI:
    """Stands in for the `google.genai` module inside backend.genai_client."""

    def __init__(self):
        self.clients = []
        self.content_calls = []
        self.video_calls = []
        self.image_results = []
        self.default_image = image_response(b"\x00\x00\x00")
        self.submit_result = pending_operation()
        self.operations = []
        self.status_checks = 0

    def Client(self, api_key):  # noqa: N802 - mirrors genai.Client
        client = SimpleNamespace(
            api_key=api_key,
            aio=SimpleNamespace(models=_FakeModels(self), operations=_FakeOperations(self)),
        )
        self.clients.append(client)
        return client

    @property
    def network_calls(self):
        return len(self.content_calls) + len(self.video_calls) + self.status_checks


@pytest.fixture
def fake_genai(monkeypatch):
    fake = FakeGenAI()
    monkeypatch.setattr(genai_client_module, "genai", fake)
    return fake


@pytest.fixture
def fake_download(monkeypatch):
    calls = []

    async def _download(uri, api_key, timeout=None, transport=None):
        calls.append({"uri": uri, "api_key": api_key})
        return b"\x00\x00\x00\x18ftypmp42"

    monkeypatch.setattr(genai_client_module, "download_video", _download)
    return calls
