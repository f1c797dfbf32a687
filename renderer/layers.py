"""레이어 합성 모듈 — 배경 → 텍스트 레이어 → 전경(피사체) 순서로 합성한다."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from PIL import Image

from content.background import BackdropSpec, render_backdrop
from editor.errors import ExportError
from editor.text_layer import TextLayer
from .canvas import Canvas
from .export import ExportOptions, encode
from .layout import MIN_TEXT_WIDTH, TEXT_MARGIN, centered_origin, safe_text_width, to_pixels
from .text import get_font, parse_color, render_text

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255, 255)
PREVIEW_FOREGROUND_OPACITY = 0.6


class RefusalReason(Enum):
    MISSING_BACKGROUND = "missing_background"
    MISSING_FOREGROUND = "missing_foreground"
    ZERO_DIMENSION = "zero_dimension"
    ENCODE_FAILED = "encode_failed"


@dataclass(frozen=True)
class RenderResult:
    """렌더 결과. 성공이면 data, 거부되면 refusal과 사유 메시지를 담는다."""
    data: bytes | None = None
    refusal: RefusalReason | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.refusal is None and self.data is not None


def _with_opacity(image: Image.Image, opacity: float) -> Image.Image:
    image = image.convert("RGBA")
    if opacity >= 1.0:
        return image
    alpha = image.getchannel("A").point(lambda a: int(round(a * max(0.0, opacity))))
    image.putalpha(alpha)
    return image


class LayerCompositor:
    """배경, 텍스트 레이어, 전경 이미지를 합성하여 최종 이미지를 만든다.

    렌더링은 입력만으로 결정되며 레이어 상태를 바꾸지 않는다.
    캔버스는 호출자가 소유하고 명시적으로 넘겨준다.
    """

    def __init__(self, canvas: Canvas, text_margin: int = TEXT_MARGIN,
                 min_text_width: int = MIN_TEXT_WIDTH):
        self._canvas = canvas
        self._text_margin = text_margin
        self._min_text_width = min_text_width

    def draw_text_layer(self, layer: TextLayer) -> None:
        """텍스트 레이어 하나를 현재 캔버스에 그린다."""
        width, height = self._canvas.size
        font = get_font(layer.font_family, layer.font_weight, layer.font_size)
        text_img = render_text(
            layer.display_text(),
            font,
            color=parse_color(layer.color),
            opacity=layer.opacity,
            max_width=safe_text_width(width, self._text_margin, self._min_text_width),
        )
        if layer.rotation:
            # 캔버스 좌표계(y 아래 방향)의 시계방향 회전 = PIL의 음수 각도
            text_img = text_img.rotate(-layer.rotation, resample=Image.Resampling.BICUBIC,
                                       expand=True)
        center = to_pixels(layer.position, (width, height))
        self._canvas.paste(text_img, centered_origin(center, text_img.size))

    def compose(
        self,
        background: Image.Image,
        layers: Iterable[TextLayer],
        foreground: Image.Image | None = None,
        backdrop: BackdropSpec | None = None,
        opaque: bool = False,
        text_on_top: bool = False,
    ) -> Image.Image:
        """합성된 RGBA 이미지를 반환한다.

        Args:
            background: 배경 원본. 캔버스 크기는 이 이미지의 원본 해상도를 따른다
            layers: 목록 순서대로 칠해지는 텍스트 레이어
            foreground: 피사체 컷아웃. None이면 텍스트가 맨 위
            backdrop: 배경 모드 설정
            opaque: 알파를 지원하지 않는 포맷이면 True, 먼저 흰색으로 채운다
            text_on_top: 미리보기용. 전경을 반투명하게 깔고 텍스트를 그 위에 그린다
        """
        self._canvas.resize(*background.size)
        if opaque:
            self._canvas.clear(WHITE)

        self._canvas.paste(render_backdrop(backdrop or BackdropSpec(), background))

        if text_on_top and foreground is not None:
            self._canvas.paste(_with_opacity(foreground, PREVIEW_FOREGROUND_OPACITY))
            foreground = None

        for layer in layers:
            self.draw_text_layer(layer)

        # 전경은 크기 조정 없이 (0, 0)에 그린다
        if foreground is not None:
            self._canvas.paste(foreground.convert("RGBA"), (0, 0))

        return self._canvas.to_image()

    def render(
        self,
        background: Image.Image | None,
        layers: Iterable[TextLayer],
        foreground: Image.Image | None,
        options: ExportOptions,
        backdrop: BackdropSpec | None = None,
        require_foreground: bool = True,
    ) -> RenderResult:
        """합성 후 인코딩까지 수행한다. 입력이 부족하면 예외 대신 거부 결과를 반환한다."""
        if background is None:
            return RenderResult(refusal=RefusalReason.MISSING_BACKGROUND,
                                message="배경 이미지가 없습니다")
        if require_foreground and foreground is None:
            return RenderResult(refusal=RefusalReason.MISSING_FOREGROUND,
                                message="피사체 분리가 끝나지 않아 전경 이미지가 없습니다")
        sources = [background] + ([foreground] if foreground is not None else [])
        if any(img.width <= 0 or img.height <= 0 for img in sources):
            return RenderResult(refusal=RefusalReason.ZERO_DIMENSION,
                                message="이미지 크기가 올바르지 않습니다")

        composed = self.compose(
            background,
            layers,
            foreground=foreground if require_foreground else None,
            backdrop=backdrop,
            opaque=not options.format.supports_alpha,
        )
        try:
            data = encode(composed, options)
        except ExportError as e:
            logger.error("%s", e)
            return RenderResult(refusal=RefusalReason.ENCODE_FAILED,
                                message="이미지를 생성하지 못했습니다")
        return RenderResult(data=data)
