"""렌더 표면 관리 모듈 — 배경 원본 해상도 크기의 RGBA 캔버스."""

from PIL import Image

TRANSPARENT = (0, 0, 0, 0)


class Canvas:
    """합성용 RGBA 캔버스.

    편집 세션이 시작될 때 만들고 끝날 때 ``close()`` 한다.
    컴포지터에는 명시적으로 전달된다.
    """

    def __init__(self, width: int = 1, height: int = 1):
        self._image = Image.new("RGBA", (max(1, width), max(1, height)), TRANSPARENT)
        self._closed = False

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def closed(self) -> bool:
        return self._closed

    def resize(self, width: int, height: int) -> None:
        """캔버스 크기를 바꾸고 투명하게 비운다."""
        self._image = Image.new("RGBA", (width, height), TRANSPARENT)

    def clear(self, color: tuple = TRANSPARENT) -> None:
        """캔버스를 지정 색상으로 초기화한다."""
        self._image = Image.new("RGBA", self._image.size, color)

    def paste(self, layer: Image.Image, position: tuple = (0, 0)) -> None:
        """레이어를 캔버스 위에 합성한다 (알파 블렌딩)."""
        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        self._image = Image.alpha_composite(self._image, _place(layer, self._image.size, position))

    def to_image(self, mode: str = "RGBA") -> Image.Image:
        """지정 모드로 변환한 복사본을 반환한다 (인코딩용)."""
        if mode == self._image.mode:
            return self._image.copy()
        return self._image.convert(mode)

    def close(self) -> None:
        if not self._closed:
            self._image.close()
            self._closed = True

    def __enter__(self) -> "Canvas":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _place(layer: Image.Image, size: tuple[int, int], position: tuple) -> Image.Image:
    """레이어를 캔버스 크기의 투명 이미지 위 지정 위치에 배치한다. 벗어난 부분은 잘린다."""
    if layer.size == size and tuple(position) == (0, 0):
        return layer
    result = Image.new("RGBA", size, TRANSPARENT)
    result.paste(layer, (int(position[0]), int(position[1])))
    return result
