"""디코딩된 이미지 자원의 수명 관리 모듈.

교체되거나 세션이 끝날 때 정확히 한 번 해제하고,
렌더링 중인 자원은 렌더가 끝날 때까지 해제를 미룬다.
"""

import logging
from contextlib import contextmanager
from io import BytesIO

from PIL import Image

logger = logging.getLogger(__name__)


class ImageResource:
    """PIL 이미지를 감싸는 해제 가능한 핸들."""

    def __init__(self, image: Image.Image, name: str = ""):
        self._image: Image.Image | None = image
        self._name = name
        self._in_use = 0
        self._release_requested = False
        self._released = False

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "") -> "ImageResource":
        image = Image.open(BytesIO(data))
        image.load()
        return cls(image, name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def released(self) -> bool:
        return self._released

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise RuntimeError(f"이미 해제된 자원: {self._name}")
        return self._image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @contextmanager
    def borrow(self):
        """렌더링 동안 자원을 붙잡는다. 그 사이 요청된 해제는 끝난 뒤 수행된다."""
        image = self.image
        self._in_use += 1
        try:
            yield image
        finally:
            self._in_use -= 1
            if self._in_use == 0 and self._release_requested:
                self._do_release()

    def release(self) -> None:
        """해제를 요청한다. 여러 번 불러도 실제 해제는 한 번뿐이다."""
        if self._released or self._release_requested:
            return
        self._release_requested = True
        if self._in_use == 0:
            self._do_release()

    def _do_release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._image is not None:
            self._image.close()
        self._image = None
        logger.debug("이미지 자원 해제: %s", self._name)


class ResourceSlot:
    """한 종류의 자원(배경, 전경 등)을 보관하는 자리. 교체 시 이전 자원을 해제한다."""

    def __init__(self, name: str):
        self._name = name
        self._resource: ImageResource | None = None

    @property
    def current(self) -> ImageResource | None:
        return self._resource

    def replace(self, resource: ImageResource | None) -> None:
        previous = self._resource
        self._resource = resource
        if previous is not None and previous is not resource:
            previous.release()

    def clear(self) -> None:
        self.replace(None)
