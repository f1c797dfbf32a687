"""화면 레이아웃 모듈 — 정규화 좌표를 출력 이미지 픽셀 좌표로 바꾼다."""

TEXT_MARGIN = 40      # 좌우 합계 여백
MIN_TEXT_WIDTH = 20   # 최대 폭의 하한


def to_pixels(position: tuple[float, float], size: tuple[int, int]) -> tuple[float, float]:
    """(0~1, 0~1) 좌표를 (px, px)로 변환한다."""
    return position[0] * size[0], position[1] * size[1]


def safe_text_width(surface_width: int, margin: int = TEXT_MARGIN,
                    minimum: int = MIN_TEXT_WIDTH) -> int:
    """텍스트가 차지할 수 있는 최대 폭. 0이나 음수가 되지 않게 하한을 둔다."""
    return max(minimum, surface_width - margin)


def centered_origin(center: tuple[float, float], size: tuple[int, int]) -> tuple[int, int]:
    """중심점에 놓일 이미지의 좌상단 좌표."""
    return int(round(center[0] - size[0] / 2)), int(round(center[1] - size[1] / 2))
