import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env nằm cạnh file settings
BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = float(raw)
    # 0 nghĩa là không giới hạn
    return value or None


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    return value or None


class Settings:
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")

    IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
    VIDEO_MODEL: str = os.getenv("VIDEO_MODEL", "veo-3.1-fast-generate-preview")

    IMAGE_ASPECT_RATIO: str = os.getenv("IMAGE_ASPECT_RATIO", "1:1")
    VIDEO_RESOLUTION: str = os.getenv("VIDEO_RESOLUTION", "720p")
    VIDEO_ASPECT_RATIO: str = os.getenv("VIDEO_ASPECT_RATIO", "16:9")

    POLL_INTERVAL: float = _env_float("POLL_INTERVAL", 10.0) or 10.0  # giây
    POLL_MAX_ATTEMPTS: Optional[int] = _env_int("POLL_MAX_ATTEMPTS", None)
    POLL_TIMEOUT: Optional[float] = _env_float("POLL_TIMEOUT", 900.0)

    DOWNLOAD_TIMEOUT: float = _env_float("DOWNLOAD_TIMEOUT", 120.0) or 120.0

    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
