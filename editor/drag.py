"""드래그 위치 매핑 모듈 — 포인터 이동을 정규화 좌표 갱신으로 바꾼다.

드래그 중간 갱신은 히스토리에 쌓지 않고, 놓는 순간 한 번만 커밋한다.
마우스와 터치는 같은 포인터 좌표로 다룬다.
"""

import logging
from dataclasses import dataclass

from editor.history import History
from editor.text_layer import Position, TextLayer, find_layer

logger = logging.getLogger(__name__)


@dataclass
class DragSession:
    """포인터 다운 ~ 업 사이에만 존재하는 임시 상태."""
    layer_id: str
    start_pointer: tuple[float, float]   # 컨테이너 기준 px
    start_position: Position
    origin_layers: tuple[TextLayer, ...]
    last_layers: tuple[TextLayer, ...] | None = None


def map_pointer_delta(
    start_position: Position,
    start_pointer: tuple[float, float],
    pointer: tuple[float, float],
    container_size: tuple[float, float],
) -> Position:
    """포인터 이동량(px)을 컨테이너 크기로 나눠 시작 위치에 더한 뒤 [0,1]로 자른다."""
    width, height = container_size
    dx = (pointer[0] - start_pointer[0]) / width
    dy = (pointer[1] - start_pointer[1]) / height
    return Position(start_position.x + dx, start_position.y + dy).clamped()


class DragMapper:
    """선택된 레이어 하나를 끌어 옮기는 상호작용을 관리한다."""

    def __init__(self, history: History):
        self._history = history
        self._session: DragSession | None = None

    @property
    def active(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> DragSession | None:
        return self._session

    def begin(self, pointer: tuple[float, float], selected_id: str | None) -> bool:
        """선택된 레이어가 있을 때만 드래그 세션을 시작한다."""
        if selected_id is None:
            return False
        layers = tuple(self._history.present)
        layer = find_layer(layers, selected_id)
        if layer is None:
            return False
        self._session = DragSession(
            layer_id=selected_id,
            start_pointer=(float(pointer[0]), float(pointer[1])),
            start_position=layer.position,
            origin_layers=layers,
        )
        return True

    def move(self, pointer: tuple[float, float],
             container_size: tuple[float, float]) -> Position | None:
        """이동 이벤트마다 호출된다. 컨테이너 크기는 이벤트 시점의 값을 받는다."""
        session = self._session
        if session is None:
            return None
        width, height = container_size
        if width <= 0 or height <= 0:
            return None

        layers = tuple(self._history.present)
        if find_layer(layers, session.layer_id) is None:
            # 드래그 도중 레이어가 삭제됨
            self.abandon()
            return None

        position = map_pointer_delta(
            session.start_position, session.start_pointer, pointer, container_size,
        )
        new_layers = tuple(
            layer.with_position(*position) if layer.id == session.layer_id else layer
            for layer in layers
        )
        self._history.set_present_without_push(new_layers)
        session.last_layers = new_layers
        return position

    def end(self) -> bool:
        """포인터 업. 중간 갱신이 있었으면 드래그 전체를 한 단계로 커밋한다."""
        session = self._session
        self._session = None
        if session is None or session.last_layers is None:
            return False

        current = tuple(self._history.present)
        if find_layer(current, session.layer_id) is None:
            logger.debug("드래그 대상 레이어 없음, 커밋 생략: %s", session.layer_id)
            return False

        # present를 드래그 시작 시점으로 돌린 뒤 최종 상태를 push
        self._history.set_present_without_push(session.origin_layers)
        self._history.push(current)
        return True

    def abandon(self) -> None:
        """커밋 없이 세션을 버린다."""
        if self._session is not None:
            logger.debug("드래그 세션 폐기: %s", self._session.layer_id)
        self._session = None
