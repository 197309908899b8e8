# backend/model.py
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JobStatus = Literal["submitted", "polling", "done", "failed"]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True)


class SourceImage(_Request):
    data: str  # base64, không có tiền tố data:
    mime_type: str = Field(pattern=r"^image/[a-zA-Z0-9.+-]+$")


class GenerateImageRequest(_Request):
    kind: Literal["generate"] = "generate"
    prompt: str
    aspect_ratio: Optional[str] = None  # None -> settings.IMAGE_ASPECT_RATIO


class EditImageRequest(_Request):
    kind: Literal["edit"] = "edit"
    prompt: str
    source_image: Optional[SourceImage] = None  # bắt buộc, kiểm tra trong adapter


class VideoRequest(_Request):
    kind: Literal["video"] = "video"
    prompt: str
    resolution: Optional[str] = None
    aspect_ratio: Optional[str] = None


GenerationRequest = Annotated[
    Union[GenerateImageRequest, EditImageRequest, VideoRequest],
    Field(discriminator="kind"),
]


class StoryboardRequest(_Request):
    concept: str


class ImageResult(BaseModel):
    image_uri: str


class BatchResult(BaseModel):
    prompts: List[str]
    images: List[str]


class VideoResult(BaseModel):
    video_url: str


class VideoJobResponse(BaseModel):
    job_id: str
    status: JobStatus


class JobResult(BaseModel):
    job_id: str
    status: JobStatus
    video_url: Optional[str] = None
    error_message: Optional[str] = None
    attempts: int = 0
