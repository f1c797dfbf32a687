"""텍스트 레이어 데이터 모델.

레이어는 순수 데이터로만 표현한다. 렌더링에 필요한 폰트/이미지 핸들은
매 렌더마다 이 값으로부터 새로 만든다.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import NamedTuple

DEFAULT_CONTENT = "TEXT"
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_COLOR = "#fbbf24"  # amber
DUPLICATE_OFFSET = 0.05

FONT_WEIGHTS = tuple(range(100, 1000, 100))


def _new_id() -> str:
    return str(uuid.uuid4())


def clamp_unit(value: float) -> float:
    """값을 [0, 1] 범위로 자른다."""
    return max(0.0, min(1.0, float(value)))


class Position(NamedTuple):
    """정규화 좌표 (0~1). 텍스트의 시각적 중심 기준."""
    x: float
    y: float

    def clamped(self) -> "Position":
        return Position(clamp_unit(self.x), clamp_unit(self.y))


@dataclass(frozen=True)
class TextLayer:
    """스타일이 적용된 텍스트 한 조각."""
    id: str = field(default_factory=_new_id)
    content: str = DEFAULT_CONTENT
    position: Position = Position(0.5, 0.5)
    font_size: float = 100          # 출력 이미지 원본 해상도 기준 px
    font_family: str = DEFAULT_FONT_FAMILY
    font_weight: int = 700          # 100~900, 100 단위
    color: str = DEFAULT_COLOR
    opacity: float = 1.0
    rotation: float = 0.0           # 도(degree), 레이어 중심 기준

    def display_text(self) -> str:
        """렌더 시 사용할 문자열. 빈 문자열이면 기본 문구로 대체한다."""
        return self.content or DEFAULT_CONTENT

    def with_position(self, x: float, y: float) -> "TextLayer":
        return replace(self, position=Position(x, y).clamped())

    def updated(self, **changes) -> "TextLayer":
        """일부 필드만 바꾼 새 레이어를 반환한다. id는 바꿀 수 없다."""
        changes.pop("id", None)
        if "position" in changes:
            x, y = changes["position"]
            changes["position"] = Position(x, y).clamped()
        return replace(self, **changes)


def create_default_text_layer(layer_id: str | None = None, **overrides) -> TextLayer:
    """기본값으로 채운 새 레이어를 만든다."""
    layer = TextLayer(id=layer_id or _new_id())
    return layer.updated(**overrides) if overrides else layer


def duplicate_layer(layer: TextLayer, offset: float = DUPLICATE_OFFSET) -> TextLayer:
    """새 id를 부여하고 위치를 조금 옮긴 복사본을 만든다."""
    return replace(
        layer,
        id=_new_id(),
        position=Position(
            min(1.0, layer.position.x + offset),
            min(1.0, layer.position.y + offset),
        ).clamped(),
    )


def find_layer(layers, layer_id: str | None) -> TextLayer | None:
    for layer in layers:
        if layer.id == layer_id:
            return layer
    return None
