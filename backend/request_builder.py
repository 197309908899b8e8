# backend/request_builder.py

import base64
import binascii
from typing import List

from google.genai import types

from .errors import InvalidSourceImage, MissingSourceImage
from .model import SourceImage

STORYBOARD_SCENES = [
    "Scene 1: Wide establishing shot",
    "Scene 2: Close up on the product features",
    "Scene 3: Action shot with dynamic lighting",
]

GALLERY_PROMPTS = [
    "A sleek modern smartphone resting on a mossy rock in a dense, misty forest, cinematic lighting",
    "A futuristic transparent smartphone floating in zero gravity with Earth in the background",
    "Close up of a premium smartphone camera lens reflecting a vibrant neon city street at night",
]


def storyboard_prompts(concept: str) -> List[str]:
    """
    Mỗi storyboard = 3 khung hình, cùng concept, khác góc máy.
    """
    return [f"{concept} - {scene}" for scene in STORYBOARD_SCENES]


def gallery_prompts() -> List[str]:
    return list(GALLERY_PROMPTS)


def build_generate_contents(prompt: str) -> List[types.Part]:
    return [types.Part.from_text(text=prompt)]


def build_generate_config(aspect_ratio: str) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
    )


def build_edit_contents(prompt: str, source_image: SourceImage) -> List[types.Part]:
    """
    Build contents EDIT:
    - Part 1: ảnh gốc (inline bytes + mime type)
    - Part 2: chỉ dẫn chỉnh sửa
    """
    try:
        image_bytes = base64.b64decode(source_image.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidSourceImage() from e
    if not image_bytes:
        raise MissingSourceImage()

    return [
        types.Part.from_bytes(data=image_bytes, mime_type=source_image.mime_type),
        types.Part.from_text(text=prompt),
    ]


def build_video_config(resolution: str, aspect_ratio: str) -> types.GenerateVideosConfig:
    return types.GenerateVideosConfig(
        number_of_videos=1,
        resolution=resolution,
        aspect_ratio=aspect_ratio,
    )
