"""내보내기 인코딩 모듈 — 포맷별 MIME, 확장자, 파일명, 품질 처리."""

import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from PIL import Image

from editor.errors import ExportError

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 0.92

BEHIND_OBJECT_STEM = "text-behind-object"
OVERLAY_STEM = "edited-image"


class ExportFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is ExportFormat.JPEG else self.value

    @property
    def supports_alpha(self) -> bool:
        return self is not ExportFormat.JPEG

    @property
    def lossy(self) -> bool:
        return self is not ExportFormat.PNG

    @property
    def pil_format(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class ExportOptions:
    """내보내기 설정. PNG는 quality를 무시하고, JPEG/WebP는 (0, 1] 범위여야 한다."""
    format: ExportFormat = ExportFormat.PNG
    quality: float = DEFAULT_QUALITY

    def __post_init__(self):
        object.__setattr__(self, "format", ExportFormat(self.format))
        if self.format.lossy and not (0 < self.quality <= 1):
            raise ValueError(f"quality는 (0, 1] 범위여야 합니다: {self.quality}")

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    def filename(self, stem: str = BEHIND_OBJECT_STEM) -> str:
        return f"{stem}.{self.format.extension}"


@dataclass(frozen=True)
class ExportArtifact:
    """다운로드로 넘길 최종 결과물."""
    filename: str
    mime_type: str
    data: bytes


def encode(image: Image.Image, options: ExportOptions) -> bytes:
    """이미지를 요청 포맷으로 인코딩한다. 실패하거나 결과가 비면 ExportError."""
    fmt = options.format
    if not fmt.supports_alpha and image.mode != "RGB":
        image = image.convert("RGB")

    params: dict = {}
    if fmt.lossy:
        params["quality"] = max(1, min(100, int(round(options.quality * 100))))
    if fmt is ExportFormat.WEBP:
        params["method"] = 4

    buf = BytesIO()
    try:
        image.save(buf, format=fmt.pil_format, **params)
    except (OSError, ValueError, KeyError) as e:
        raise ExportError(f"이미지 인코딩 실패 ({fmt.value}): {e}") from e
    data = buf.getvalue()
    if not data:
        raise ExportError(f"이미지 인코딩 결과가 비어 있음 ({fmt.value})")
    return data
