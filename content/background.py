"""배경(backdrop) 생성 모듈 — 원본, 단색, 그라데이션, 블러."""

import logging
from dataclasses import dataclass
from enum import Enum

from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFilter

logger = logging.getLogger(__name__)


class BackdropMode(str, Enum):
    ORIGINAL = "original"
    SOLID = "solid"
    GRADIENT = "gradient"
    BLUR = "blur"


class GradientDirection(str, Enum):
    TOP_BOTTOM = "top-bottom"
    LEFT_RIGHT = "left-right"
    DIAGONAL = "diagonal"


@dataclass(frozen=True)
class BackdropSpec:
    """배경 칠하기 설정."""
    mode: BackdropMode = BackdropMode.ORIGINAL
    solid_color: str = "#f8f9fa"
    gradient_start: str = "#6366f1"
    gradient_end: str = "#8b5cf6"
    gradient_direction: GradientDirection = GradientDirection.TOP_BOTTOM
    blur_radius: float = 12

    @classmethod
    def from_config(cls, config: dict) -> "BackdropSpec":
        return cls(
            mode=BackdropMode(config.get("mode", "original")),
            solid_color=config.get("solid_color", "#f8f9fa"),
            gradient_start=config.get("gradient_start", "#6366f1"),
            gradient_end=config.get("gradient_end", "#8b5cf6"),
            gradient_direction=GradientDirection(config.get("gradient_direction", "top-bottom")),
            blur_radius=config.get("blur_radius", 12),
        )


def _rgba(color: str) -> tuple[int, int, int, int]:
    rgb = ImageColor.getrgb(color)
    return tuple(rgb[:3]) + (rgb[3] if len(rgb) == 4 else 255,)


def _lerp_color(c1: tuple, c2: tuple, t: float) -> tuple:
    """두 색상을 t(0~1) 비율로 선형 보간한다."""
    return tuple(int(round(a + (b - a) * t)) for a, b in zip(c1, c2))


def solid(size: tuple[int, int], color: str) -> Image.Image:
    return Image.new("RGBA", size, _rgba(color))


def linear_gradient(size: tuple[int, int], start: str, end: str,
                    direction: GradientDirection = GradientDirection.TOP_BOTTOM) -> Image.Image:
    """두 색 사이의 선형 그라데이션.

    대각선은 좌상단(0,0) → 우하단(w,h) 축으로, 각 픽셀을 축에 투영한 비율로 칠한다.
    """
    w, h = size
    c1, c2 = _rgba(start), _rgba(end)
    direction = GradientDirection(direction)

    if direction == GradientDirection.TOP_BOTTOM:
        img = Image.new("RGBA", size)
        draw = ImageDraw.Draw(img)
        for y in range(h):
            t = y / (h - 1) if h > 1 else 0.0
            draw.line([(0, y), (w - 1, y)], fill=_lerp_color(c1, c2, t))
        return img

    if direction == GradientDirection.LEFT_RIGHT:
        img = Image.new("RGBA", size)
        draw = ImageDraw.Draw(img)
        for x in range(w):
            t = x / (w - 1) if w > 1 else 0.0
            draw.line([(x, 0), (x, h - 1)], fill=_lerp_color(c1, c2, t))
        return img

    # 대각선: t = (x*w + y*h) / (w^2 + h^2) = 가로 성분 + 세로 성분
    denom = float(w * w + h * h) or 1.0
    cols = Image.new("L", (w, 1))
    cols.putdata([int(x * w / denom * 255) for x in range(w)])
    rows = Image.new("L", (1, h))
    rows.putdata([int(y * h / denom * 255) for y in range(h)])
    level = ImageChops.add(cols.resize(size, Image.Resampling.NEAREST),
                           rows.resize(size, Image.Resampling.NEAREST))
    start_img = Image.new("RGBA", size, c1)
    end_img = Image.new("RGBA", size, c2)
    return Image.composite(end_img, start_img, level)


def blurred(image: Image.Image, radius: float) -> Image.Image:
    """원본을 가우시안 블러로 흐리게 한다."""
    if radius <= 0:
        return image.convert("RGBA")
    return image.convert("RGBA").filter(ImageFilter.GaussianBlur(radius))


def render_backdrop(spec: BackdropSpec, background: Image.Image) -> Image.Image:
    """모드에 맞는 배경 레이어를 background 크기로 만든다."""
    size = background.size
    mode = BackdropMode(spec.mode)
    if mode == BackdropMode.SOLID:
        return solid(size, spec.solid_color)
    if mode == BackdropMode.GRADIENT:
        return linear_gradient(size, spec.gradient_start, spec.gradient_end,
                               spec.gradient_direction)
    if mode == BackdropMode.BLUR:
        return blurred(background, spec.blur_radius)
    return background.convert("RGBA")
