"""편집기 예외 모듈 — 사용자에게 알릴 오류를 종류별로 나눈다."""


class EditorError(Exception):
    """편집기 오류의 기본 클래스."""


class InputValidationError(EditorError):
    """업로드 입력이 이미지가 아니거나 손상된 경우."""


class SegmentationError(EditorError):
    """배경/피사체 분리에 실패한 경우."""


class SegmentationCancelled(EditorError):
    """더 새로운 업로드로 인해 분리 작업이 무효화된 경우."""


class ExportError(EditorError):
    """인코딩 단계에서 결과물을 만들지 못한 경우."""
