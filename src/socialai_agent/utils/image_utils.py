from __future__ import annotations

import base64
import binascii
import io
import re
from pathlib import Path

from PIL import Image

from socialai_agent.utils.http_client import create_http_client

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)

_MIME_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def encode_image_file(path_or_url: str) -> str:
    """파일 경로 또는 URL을 브랜드 프로필에 담을 이미지 참조로 변환합니다.

    - HTTPS/HTTP URL, data URL → 그대로 반환
    - 로컬 파일 경로 → base64 data URL로 변환 (jpg/png/gif/webp 지원)
    """
    if path_or_url.startswith(("http://", "https://", "data:")):
        return path_or_url

    path = Path(path_or_url)
    mime = _MIME_MAP.get(path.suffix.lower(), "image/jpeg")
    b64 = base64.b64encode(path.read_bytes()).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def is_data_url(value: str) -> bool:
    return bool(_DATA_URL_RE.match(value))


def decode_data_url(data_url: str) -> Image.Image:
    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("not a base64 data URL")
    try:
        raw = base64.b64decode(match.group("data"), validate=False)
    except binascii.Error as exc:
        raise ValueError("invalid base64 payload") from exc
    return Image.open(io.BytesIO(raw))


def image_to_data_url(image: Image.Image, format: str = "JPEG", quality: int = 90) -> str:
    """PIL Image를 Vision API용 base64 data URL로 변환합니다."""
    buf = io.BytesIO()
    if format.upper() == "JPEG":
        image.convert("RGB").save(buf, format="JPEG", quality=quality)
        mime = "image/jpeg"
    else:
        image.save(buf, format=format)
        mime = f"image/{format.lower()}"
    b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def prepare_image_for_vision(image_ref: str, max_side: int = 1024) -> str:
    """이미지 참조를 Vision 입력으로 변환합니다.

    data URL은 긴 변이 max_side를 넘으면 비율을 유지해 축소한 JPEG로 재인코딩합니다.
    http URL은 그대로 전달합니다.
    """
    if not is_data_url(image_ref):
        return image_ref

    image = decode_data_url(image_ref)
    if max(image.size) <= max_side:
        return image_ref

    image.thumbnail((max_side, max_side), Image.LANCZOS)
    return image_to_data_url(image)


async def download_image(url: str) -> Image.Image:
    """URL에서 이미지를 다운로드하여 PIL Image로 반환합니다."""
    async with create_http_client(timeout=30) as client:
        response = await client.get(url)
        response.raise_for_status()
    return Image.open(io.BytesIO(response.content))
