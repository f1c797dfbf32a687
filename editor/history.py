"""되돌리기/다시하기 히스토리 모듈 — 선형 undo 스택."""

import logging
from collections import deque
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_HISTORY_SIZE = 50


class History(Generic[T]):
    """past / present / future 세 구간으로 상태 스냅샷을 관리한다.

    경계에서의 undo/redo는 오류가 아니라 아무 일도 하지 않는다.
    past가 용량을 넘으면 가장 오래된 항목이 조용히 버려진다.

    Args:
        initial: 최초 present 상태
        max_size: past에 보관할 최대 개수
        snapshot: 저장 전에 상태를 불변 값으로 바꾸는 함수 (예: ``tuple``)
    """

    def __init__(self, initial: T, max_size: int = MAX_HISTORY_SIZE,
                 snapshot: Callable[[T], T] | None = None):
        self._snapshot = snapshot or (lambda state: state)
        self._past: deque[T] = deque(maxlen=max_size)
        self._present: T = self._snapshot(initial)
        self._future: deque[T] = deque()

    @property
    def past(self) -> list[T]:
        return list(self._past)

    @property
    def present(self) -> T:
        return self._present

    @property
    def future(self) -> list[T]:
        return list(self._future)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    def push(self, state: T) -> None:
        """현재 상태를 past로 넘기고 새 상태를 커밋한다. redo 경로는 버려진다."""
        self._past.append(self._present)
        self._present = self._snapshot(state)
        self._future.clear()

    def undo(self) -> None:
        if not self._past:
            return
        self._future.appendleft(self._present)
        self._present = self._past.pop()

    def redo(self) -> None:
        if not self._future:
            return
        self._past.append(self._present)
        self._present = self._future.popleft()

    def set_present_without_push(self, state: T) -> None:
        """히스토리에 남기지 않고 present만 교체한다 (드래그 중 갱신용)."""
        self._present = self._snapshot(state)

    def reset(self, state: T) -> None:
        """past와 future를 비우고 present를 설정한다 (새 이미지 로드 시)."""
        self._past.clear()
        self._future.clear()
        self._present = self._snapshot(state)
        logger.debug("히스토리 초기화")
