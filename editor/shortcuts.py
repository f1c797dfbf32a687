"""키보드 단축키 모듈 — Ctrl/Cmd+Z 되돌리기, Shift 추가 시 다시하기."""

from dataclasses import dataclass
from enum import Enum

# 텍스트 입력 중에는 단축키를 가로채지 않는다
_TEXT_ENTRY_TAGS = {"INPUT", "TEXTAREA"}


class ShortcutAction(Enum):
    UNDO = "undo"
    REDO = "redo"


@dataclass
class KeyEvent:
    """키 입력 이벤트."""
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    target_tag: str = ""
    content_editable: bool = False

    @property
    def in_text_entry(self) -> bool:
        return self.target_tag.upper() in _TEXT_ENTRY_TAGS or self.content_editable


def resolve_shortcut(event: KeyEvent) -> ShortcutAction | None:
    """이벤트에 해당하는 동작을 반환한다. 해당 없으면 None."""
    if event.in_text_entry:
        return None
    if not (event.ctrl or event.meta):
        return None
    if event.key.lower() != "z":
        return None
    return ShortcutAction.REDO if event.shift else ShortcutAction.UNDO
