"""Trạng thái của từng panel: idle -> in_flight -> settled."""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, MutableMapping, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .api import BackendError

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Please enter your Gemini API Key at the top of the page."

DEFAULT_STORYBOARD_CONCEPT = (
    "A cinematic commercial for a sleek new smartphone. Neon-lit cyberpunk city background."
)
DEFAULT_VIDEO_PROMPT = (
    "A cinematic, high-quality commercial for a sleek new smartphone. The phone is floating "
    "in a neon-lit cyberpunk city, rotating slowly to show off its glowing edges and "
    "futuristic camera module."
)


@dataclass
class PanelState:
    status: str = "idle"
    result: Any = None
    error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.status == "in_flight"

    def begin(self) -> bool:
        """Bắt đầu 1 lượt mới. Đang chạy thì bỏ qua (trả False)."""
        if self.busy:
            return False
        self.status = "in_flight"
        self.result = None
        self.error = None
        return True

    def succeed(self, result: Any) -> None:
        self.status = "settled"
        self.result = result
        self.error = None

    def fail(self, message: str) -> None:
        self.status = "settled"
        self.result = None
        self.error = message

    def reset(self) -> None:
        self.status = "idle"
        self.result = None
        self.error = None


def run_action(state: PanelState, action: Callable[[], Any], fallback_error: str) -> bool:
    """
    Chạy action trong vòng đời của panel.
    Trả False nếu panel đang bận (lần bấm thứ 2 không có tác dụng).
    Dù action lỗi kiểu gì, panel luôn về trạng thái settled.
    """
    if not state.begin():
        return False
    try:
        result = action()
    except BackendError as e:
        state.fail(str(e) or fallback_error)
    except Exception:
        logger.exception("Panel action failed unexpectedly")
        state.fail(fallback_error)
    else:
        state.succeed(result)
    finally:
        # stop/rerun của Streamlit không phải Exception, vẫn phải mở khóa panel
        if state.busy:
            state.fail(fallback_error)
    return True


def require_key(state: PanelState, api_key: Optional[str]) -> bool:
    """Không có key -> báo lỗi lên panel, không gọi backend."""
    if api_key and api_key.strip():
        return True
    state.fail(MISSING_KEY_MESSAGE)
    return False


def can_submit(
    state: PanelState,
    prompt: Optional[str],
    editing: bool = False,
    source: Optional[Tuple[str, str]] = None,
) -> bool:
    if state.busy or not prompt or not prompt.strip():
        return False
    return not (editing and source is None)


def reset_on_change(state: PanelState, session: MutableMapping[str, Any], key: str, value: Any) -> bool:
    """Giá trị `session[key]` đổi (mode, file upload) -> xóa kết quả cũ của panel."""
    if key in session and session[key] == value:
        return False
    session[key] = value
    state.reset()
    return True


def read_source_image(data: bytes) -> Tuple[str, str]:
    """
    Đọc file ảnh upload -> (base64, mime_type).
    File không phải ảnh -> BackendError.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise BackendError(f"Unsupported image file: {e}") from e

    mime_type = Image.MIME.get(fmt or "", "")
    if not mime_type.startswith("image/"):
        raise BackendError(f"Unsupported image format: {fmt}")
    return base64.b64encode(data).decode("ascii"), mime_type
