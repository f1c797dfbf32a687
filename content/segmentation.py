"""배경/피사체 분리 모듈 — 외부 분할 모델을 감싸는 어댑터와 취소 가능한 작업.

어댑터는 이미지 바이트를 받아 (배경 PNG, 전경 PNG)를 돌려준다.
배경은 피사체 부분이 투명하고, 전경은 피사체만 남기고 투명하다.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Protocol

from PIL import Image, ImageChops, UnidentifiedImageError

from editor.errors import SegmentationCancelled, SegmentationError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class SegmentationResult:
    background: bytes
    foreground: bytes


class Segmenter(Protocol):
    async def segment(self, image: bytes,
                      progress: ProgressCallback | None = None) -> SegmentationResult:
        ...


class ProgressReporter:
    """진행률을 0~1로 자르고 감소하지 않도록 보정하여 전달한다."""

    def __init__(self, callback: ProgressCallback | None = None):
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def __call__(self, fraction: float) -> None:
        value = max(self._last, min(1.0, fraction))
        self._last = value
        if self._callback is not None:
            self._callback(value)


def _decode(image: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(image))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise SegmentationError(f"지원하지 않는 이미지 입력입니다: {e}") from e
    return img.convert("RGBA")


def _png(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def split_by_mask(image: Image.Image, mask: Image.Image) -> SegmentationResult:
    """피사체 마스크(L, 255=피사체)로 원본을 배경/전경 두 장으로 나눈다."""
    rgba = image.convert("RGBA")
    mask = mask.convert("L")
    if mask.size != rgba.size:
        mask = mask.resize(rgba.size, Image.Resampling.BILINEAR)
    alpha = rgba.getchannel("A")

    foreground = rgba.copy()
    foreground.putalpha(ImageChops.multiply(alpha, mask))
    background = rgba.copy()
    background.putalpha(ImageChops.multiply(alpha, ImageChops.invert(mask)))
    return SegmentationResult(background=_png(background), foreground=_png(foreground))


class RembgSegmenter:
    """rembg(U²-Net) 로컬 모델로 피사체를 분리한다."""

    def __init__(self, model: str = "u2net"):
        self._model = model
        self._session = None

    def _get_session(self):
        if self._session is None:
            from rembg import new_session
            logger.info("rembg 세션 생성: %s", self._model)
            self._session = new_session(self._model)
        return self._session

    def _split(self, image: bytes, report: ProgressCallback) -> SegmentationResult:
        from rembg import remove

        img = _decode(image)
        report(0.1)
        session = self._get_session()
        report(0.3)
        mask = remove(img.convert("RGB"), session=session, only_mask=True)
        report(0.8)
        return split_by_mask(img, mask)

    async def segment(self, image: bytes,
                      progress: ProgressCallback | None = None) -> SegmentationResult:
        report = ProgressReporter(progress)
        report(0.0)
        loop = asyncio.get_running_loop()

        def from_worker(fraction: float) -> None:
            # 진행률 콜백은 이벤트 루프 스레드에서만 호출한다
            loop.call_soon_threadsafe(report, fraction)

        try:
            result = await loop.run_in_executor(None, self._split, image, from_worker)
        except SegmentationError:
            raise
        except Exception as e:
            raise SegmentationError(f"피사체 분리 실패: {e}") from e
        report(1.0)
        return result


class RemoteSegmenter:
    """원격 피사체 추출 서비스(HTTP)를 호출한다.

    요청: ``{"image": "data:image/png;base64,..."}``
    응답: ``{"image": "data:image/png;base64,..."}`` (배경이 제거된 전경)
    """

    def __init__(self, url: str, timeout_sec: float = 60):
        self._url = url
        self._timeout_sec = timeout_sec

    async def segment(self, image: bytes,
                      progress: ProgressCallback | None = None) -> SegmentationResult:
        report = ProgressReporter(progress)
        report(0.0)
        original = _decode(image)
        try:
            foreground_bytes = await self._fetch(image)
        except SegmentationError:
            raise
        except Exception as e:
            raise SegmentationError(f"원격 분리 서비스 호출 실패: {e}") from e
        report(0.8)

        foreground = _decode(foreground_bytes)
        result = split_by_mask(original, foreground.getchannel("A"))
        report(1.0)
        return result

    async def _fetch(self, image: bytes) -> bytes:
        import aiohttp

        payload = {"image": "data:image/png;base64," + base64.b64encode(image).decode()}
        timeout = aiohttp.ClientTimeout(total=self._timeout_sec)
        async with aiohttp.ClientSession() as session:
            async with session.post(self._url, json=payload, timeout=timeout) as resp:
                resp.raise_for_status()
                result = await resp.json()

        if "image" not in result:
            raise SegmentationError(f"분리 서비스 오류: {result.get('error', '응답에 이미지 없음')}")
        data = result["image"]
        data = data.split(",", 1)[1] if "," in data else data
        return base64.b64decode(data)


class CancellationToken:
    """더 새로운 업로드가 들어오면 이전 작업의 결과를 무효로 표시한다."""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise SegmentationCancelled("더 새로운 이미지로 대체된 분리 작업")


class SegmentationTask:
    """분리 작업 하나. 결과를 돌려주기 전에 취소 여부를 확인한다."""

    def __init__(self, segmenter: Segmenter, image: bytes,
                 token: CancellationToken | None = None,
                 progress: ProgressCallback | None = None):
        self._segmenter = segmenter
        self._image = image
        self.token = token or CancellationToken()
        self._progress = progress

    def _on_progress(self, fraction: float) -> None:
        # 무효화된 작업의 진행률은 화면에 반영하지 않는다
        if not self.token.cancelled and self._progress is not None:
            self._progress(fraction)

    async def run(self) -> SegmentationResult:
        self.token.raise_if_cancelled()
        result = await self._segmenter.segment(self._image, progress=self._on_progress)
        self.token.raise_if_cancelled()
        return result


def create_segmenter(config: dict) -> Segmenter:
    """config에 따라 적절한 분리 어댑터를 생성한다."""
    provider = config.get("provider", "rembg")

    if provider == "remote":
        url = config.get("url", "")
        if not url:
            logger.warning("원격 분리 서비스 URL 없음, rembg로 대체")
            return RembgSegmenter(model=config.get("model", "u2net"))
        return RemoteSegmenter(url=url, timeout_sec=config.get("timeout_sec", 60))

    return RembgSegmenter(model=config.get("model", "u2net"))
