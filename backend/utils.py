import base64
import time
import uuid
from typing import Union


def gen_job_id() -> str:
    return str(uuid.uuid4())


def get_timestamp_ms() -> int:
    return int(time.time() * 1000)


def to_data_uri(payload: Union[bytes, str], mime_type: str = "image/png") -> str:
    """
    Đóng gói payload ảnh thành data URI để hiển thị trực tiếp.
    SDK trả về bytes đã decode, còn REST trả về chuỗi base64 -> chấp nhận cả hai.
    """
    if isinstance(payload, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(payload)).decode("ascii")
    else:
        encoded = payload
    return f"data:{mime_type};base64,{encoded}"
