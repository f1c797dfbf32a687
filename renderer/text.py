"""텍스트 렌더링 모듈 — 텍스트 레이어를 투명 배경 RGBA 이미지로 그린다.

폰트 패밀리는 CSS 표기("Inter, sans-serif")를 그대로 받아 앞에서부터 찾고,
하나도 없으면 Pillow 내장 폰트로 대체한다.
"""

import logging
import os
import sys as _sys
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#fbbf24"
LINE_SPACING = 0.15  # 폰트 크기 대비 줄 간격

# 편집기에서 고를 수 있는 폰트 패밀리
FONT_FAMILIES = [
    ("Arial", "Arial"),
    ("Times New Roman", "Times New Roman"),
    ("Helvetica", "Helvetica"),
    ("Georgia", "Georgia"),
    ("Impact", "Impact"),
    ("Bebas Neue", "Bebas Neue, sans-serif"),
    ("Inter", "Inter, sans-serif"),
    ("Montserrat", "Montserrat, sans-serif"),
    ("Oswald", "Oswald, sans-serif"),
    ("Playfair Display", "Playfair Display, serif"),
    ("Poppins", "Poppins, sans-serif"),
    ("Raleway", "Raleway, sans-serif"),
    ("Roboto", "Roboto, sans-serif"),
    ("Source Sans 3", "Source Sans 3, sans-serif"),
    ("Space Grotesk", "Space Grotesk, sans-serif"),
]

# 패밀리 이름(소문자) → (보통 굵기 파일 후보, 굵은 파일 후보)
_FAMILY_FILES = {
    "arial": (["arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"],
              ["arialbd.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf"]),
    "helvetica": (["Helvetica.ttc", "LiberationSans-Regular.ttf"],
                  ["Helvetica.ttc", "LiberationSans-Bold.ttf"]),
    "times new roman": (["times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf"],
                        ["timesbd.ttf", "Times New Roman Bold.ttf", "LiberationSerif-Bold.ttf"]),
    "georgia": (["georgia.ttf", "Georgia.ttf"], ["georgiab.ttf", "Georgia Bold.ttf"]),
    "impact": (["impact.ttf", "Impact.ttf"], ["impact.ttf", "Impact.ttf"]),
    "bebas neue": (["BebasNeue-Regular.ttf"], ["BebasNeue-Regular.ttf"]),
    "inter": (["Inter-Regular.ttf"], ["Inter-Bold.ttf"]),
    "montserrat": (["Montserrat-Regular.ttf"], ["Montserrat-Bold.ttf"]),
    "oswald": (["Oswald-Regular.ttf"], ["Oswald-Bold.ttf"]),
    "playfair display": (["PlayfairDisplay-Regular.ttf"], ["PlayfairDisplay-Bold.ttf"]),
    "poppins": (["Poppins-Regular.ttf"], ["Poppins-Bold.ttf"]),
    "raleway": (["Raleway-Regular.ttf"], ["Raleway-Bold.ttf"]),
    "roboto": (["Roboto-Regular.ttf"], ["Roboto-Bold.ttf"]),
    "source sans 3": (["SourceSans3-Regular.ttf"], ["SourceSans3-Bold.ttf"]),
    "space grotesk": (["SpaceGrotesk-Regular.ttf"], ["SpaceGrotesk-Bold.ttf"]),
    "sans-serif": (["DejaVuSans.ttf", "LiberationSans-Regular.ttf"],
                   ["DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf"]),
    "serif": (["DejaVuSerif.ttf", "LiberationSerif-Regular.ttf"],
              ["DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf"]),
}


def _system_font_dirs() -> list[Path]:
    """OS별 시스템 폰트 디렉토리."""
    if _sys.platform == "win32":
        return [Path(os.environ.get("WINDIR", "C:/Windows")) / "Fonts"]
    if _sys.platform == "darwin":
        return [Path("/System/Library/Fonts"), Path("/Library/Fonts"),
                Path.home() / "Library" / "Fonts"]
    return [Path("/usr/share/fonts"), Path("/usr/local/share/fonts"),
            Path.home() / ".fonts", Path.home() / ".local" / "share" / "fonts"]


_extra_dirs: list[Path] = []
_font_index: dict[str, str] | None = None
# 폰트 캐시
_font_cache: dict[tuple[str, int], ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}


def add_font_directory(path: str | Path) -> None:
    """폰트 검색 경로를 추가한다 (설정의 fonts.directory)."""
    global _font_index
    path = Path(path)
    if path not in _extra_dirs:
        _extra_dirs.append(path)
        _font_index = None


def _build_index() -> dict[str, str]:
    """폰트 디렉토리를 훑어 파일명 → 경로 색인을 만든다. 먼저 찾은 것이 우선."""
    index: dict[str, str] = {}
    for base in _extra_dirs + _system_font_dirs():
        if not base.is_dir():
            continue
        for root, _dirs, files in os.walk(base):
            for name in files:
                if name.lower().endswith((".ttf", ".otf", ".ttc")):
                    index.setdefault(name.lower(), os.path.join(root, name))
    return index


def _lookup(filename: str) -> str | None:
    global _font_index
    if _font_index is None:
        _font_index = _build_index()
    return _font_index.get(filename.lower())


def resolve_font_path(font_family: str, font_weight: int = 400) -> str | None:
    """CSS식 패밀리 목록에서 처음으로 찾을 수 있는 폰트 파일 경로를 반환한다."""
    bold = font_weight >= 600
    names = [n.strip().strip("'\"").lower() for n in font_family.split(",")]
    names.append("sans-serif")
    for name in names:
        candidates = _FAMILY_FILES.get(name)
        if candidates is None:
            continue
        for filename in candidates[1 if bold else 0]:
            path = _lookup(filename)
            if path:
                return path
    return None


def get_font(font_family: str, font_weight: int, size: float):
    """폰트를 로드한다 (캐싱). 찾지 못하면 Pillow 기본 폰트로 대체한다."""
    px = max(1, int(round(size)))
    path = resolve_font_path(font_family, font_weight) or ""
    key = (path, px)
    if key not in _font_cache:
        if path:
            try:
                _font_cache[key] = ImageFont.truetype(path, px)
            except OSError as e:
                logger.warning("폰트 로드 실패, 기본 폰트 사용: %s (%s)", path, e)
                _font_cache[key] = ImageFont.load_default(px)
        else:
            _font_cache[key] = ImageFont.load_default(px)
    return _font_cache[key]


def parse_color(color: str) -> tuple[int, int, int]:
    """CSS 색상 문자열을 RGB로 바꾼다. 해석할 수 없으면 기본 색을 쓴다."""
    try:
        return ImageColor.getrgb(color)[:3]
    except (ValueError, AttributeError):
        logger.warning("알 수 없는 색상 '%s', 기본색 사용", color)
        return ImageColor.getrgb(DEFAULT_COLOR)[:3]


def _text_width(font, text: str) -> float:
    return font.getlength(text)


def wrap_text(text: str, font, max_width: float) -> list[str]:
    """단어 단위로 줄바꿈한다. 명시적 개행은 그대로 유지한다.

    한 단어가 max_width보다 넓으면 그 단어만 한 줄이 된다.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if current and _text_width(font, candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def render_text(
    text: str,
    font,
    color: tuple = (255, 255, 255),
    opacity: float = 1.0,
    max_width: int | None = None,
) -> Image.Image:
    """텍스트 블록을 가운데 정렬하여 투명 배경의 RGBA 이미지로 렌더링한다.

    max_width를 넘는 줄은 단어 단위로 감싸고, 그래도 넘치면 가로로 압축한다.

    Args:
        font: ``get_font()``로 얻은 폰트
        opacity: 0~1, 알파 채널에 곱한다
        max_width: 허용 최대 폭(px). None이면 제한 없음
    """
    lines = wrap_text(text, font, max_width) if max_width else text.split("\n")

    ascent, descent = font.getmetrics()
    line_h = ascent + descent
    spacing = int(round(font.size * LINE_SPACING))
    widths = [int(round(_text_width(font, line))) for line in lines]
    w = max(widths + [1]) + 2
    h = line_h * len(lines) + spacing * (len(lines) - 1) + 2

    mask = Image.new("L", (w, h), 0)
    draw = ImageDraw.Draw(mask)
    y = 1
    for line in lines:
        draw.text((w / 2, y), line, font=font, fill=255, anchor="ma")
        y += line_h + spacing

    if opacity < 1.0:
        alpha = max(0.0, min(1.0, opacity))
        mask = mask.point(lambda a: int(round(a * alpha)))

    img = Image.new("RGBA", (w, h), tuple(color[:3]) + (0,))
    img.putalpha(mask)

    if max_width and w > max_width:
        # 캔버스 fillText의 maxWidth처럼 가로로만 줄인다
        img = img.resize((max(1, int(max_width)), h), Image.Resampling.LANCZOS)
    return img
