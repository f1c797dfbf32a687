"""업로드 검증 모듈 — 이미지가 아닌 입력은 처리 전에 거절한다."""

import logging
import mimetypes
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from editor.errors import InputValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Upload:
    """검증을 통과한 업로드 파일."""
    name: str
    mime_type: str
    data: bytes
    size: tuple[int, int]


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or "application/octet-stream"


def validate_upload(data: bytes, mime_type: str, name: str = "upload") -> Upload:
    """MIME 타입과 내용을 확인한다. 문제가 있으면 InputValidationError."""
    if not mime_type or not mime_type.startswith("image/"):
        raise InputValidationError("이미지 파일을 선택하세요 (PNG, JPG, JPEG)")
    if not data:
        raise InputValidationError(f"빈 파일입니다: {name}")

    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
        # verify()는 JPEG 본문을 확인하지 않으므로 다시 열어 끝까지 디코딩한다
        with Image.open(BytesIO(data)) as img:
            img.load()
            size = img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InputValidationError(f"이미지를 읽을 수 없습니다: {name} ({e})") from e

    if size[0] <= 0 or size[1] <= 0:
        raise InputValidationError(f"이미지 크기가 올바르지 않습니다: {name}")

    logger.info("업로드 확인: %s %s %dx%d", name, mime_type, size[0], size[1])
    return Upload(name=name, mime_type=mime_type, data=data, size=size)

