"""편집 세션 모듈 — 레이어 목록, 히스토리, 드래그, 이미지 자원의 단일 소유자.

모든 상태 변경은 이 클래스의 메서드를 통해서만 일어난다.
사용자에게 보여줄 실패는 예외 대신 ``notify`` 콜백으로 전달한다.
"""

import logging
from contextlib import ExitStack
from typing import Callable

from PIL import Image

from content.background import BackdropSpec
from content.segmentation import CancellationToken, Segmenter, SegmentationTask
from content.upload import Upload, validate_upload
from editor.drag import DragMapper
from editor.errors import InputValidationError, SegmentationCancelled, SegmentationError
from editor.history import MAX_HISTORY_SIZE, History
from editor.resources import ImageResource, ResourceSlot
from editor.shortcuts import KeyEvent, ShortcutAction, resolve_shortcut
from editor.text_layer import (
    DUPLICATE_OFFSET,
    TextLayer,
    create_default_text_layer,
    duplicate_layer,
    find_layer,
)
from renderer.canvas import Canvas
from renderer.export import BEHIND_OBJECT_STEM, OVERLAY_STEM, ExportArtifact, ExportOptions
from renderer.layers import LayerCompositor

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]


def _log_notify(level: str, message: str) -> None:
    """기본 알림: 로그로 남긴다."""
    if level == "error":
        logger.error("%s", message)
    else:
        logger.info("%s", message)


class EditorSession:
    """텍스트-뒤-피사체 편집 세션.

    Args:
        segmenter: 배경/피사체 분리 어댑터
        config: ``load_config()`` 결과 (없으면 기본값)
        notify: (level, message) 알림 콜백. level은 "success" | "error" | "info"
    """

    def __init__(self, segmenter: Segmenter, config: dict | None = None,
                 notify: Notify | None = None):
        config = config or {}
        editor_cfg = config.get("editor", {})
        render_cfg = config.get("render", {})
        export_cfg = config.get("export", {})

        self._segmenter = segmenter
        self._notify = notify or _log_notify
        self._layer_defaults = dict(config.get("layer", {}))
        self._duplicate_offset = editor_cfg.get("duplicate_offset", DUPLICATE_OFFSET)

        self._history: History[tuple[TextLayer, ...]] = History(
            (), max_size=editor_cfg.get("max_history", MAX_HISTORY_SIZE), snapshot=tuple,
        )
        self._drag = DragMapper(self._history)
        self._selected_id: str | None = None

        # 세션 수명 동안 쓰는 렌더 표면
        self._canvas = Canvas()
        self._compositor = LayerCompositor(
            self._canvas,
            text_margin=render_cfg.get("text_margin", 40),
            min_text_width=render_cfg.get("min_text_width", 20),
        )

        self._upload: Upload | None = None
        self._original = ResourceSlot("original")
        self._background = ResourceSlot("background")
        self._foreground = ResourceSlot("foreground")
        self._token: CancellationToken | None = None

        self.progress = 0.0
        self.is_processing = False
        self.preview_text_on_top = True
        self.backdrop = BackdropSpec.from_config(config.get("backdrop", {}))
        self.export_options = ExportOptions(
            format=export_cfg.get("format", "png"),
            quality=export_cfg.get("quality", 0.92),
        )

    # ── 상태 조회 ──

    @property
    def layers(self) -> tuple[TextLayer, ...]:
        return self._history.present

    @property
    def history(self) -> History:
        return self._history

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_layer(self) -> TextLayer | None:
        return find_layer(self.layers, self._selected_id)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def upload(self) -> Upload | None:
        return self._upload

    @property
    def is_processed(self) -> bool:
        return self._background.current is not None and self._foreground.current is not None

    @property
    def image_size(self) -> tuple[int, int] | None:
        resource = self._foreground.current or self._original.current
        return resource.size if resource is not None else None

    # ── 이미지 업로드 / 분리 ──

    def load_image(self, data: bytes, mime_type: str, name: str = "upload") -> Upload | None:
        """새 이미지를 받는다. 검증에 실패하면 상태를 바꾸지 않는다."""
        try:
            upload = validate_upload(data, mime_type, name)
            original = ImageResource.from_bytes(data, name)
        except InputValidationError as e:
            self._notify("error", str(e))
            return None
        except OSError as e:
            self._notify("error", f"이미지를 읽을 수 없습니다: {name} ({e})")
            return None

        # 진행 중인 분리 작업은 무효화하고 이전 자원은 해제
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self._drag.abandon()
        self._background.clear()
        self._foreground.clear()
        self._original.replace(original)
        self._upload = upload
        self._history.reset(())
        self._selected_id = None
        self.progress = 0.0
        self.is_processing = False
        return upload

    def _set_progress(self, fraction: float) -> None:
        self.progress = fraction

    async def segment(self) -> bool:
        """현재 업로드에 대해 배경/피사체 분리를 수행한다.

        더 새로운 업로드가 들어온 뒤 끝난 작업의 결과는 버린다.
        """
        upload = self._upload
        if upload is None:
            self._notify("error", "먼저 이미지를 업로드하세요")
            return False

        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token
        self.is_processing = True
        self.progress = 0.0
        task = SegmentationTask(self._segmenter, upload.data, token=token,
                                progress=self._set_progress)
        logger.info("피사체 분리 시작: %s", upload.name)
        try:
            result = await task.run()
            background = ImageResource.from_bytes(result.background, "background")
            foreground = ImageResource.from_bytes(result.foreground, "foreground")
        except SegmentationCancelled:
            logger.info("이전 이미지의 분리 결과 무시: %s", upload.name)
            return False
        except (SegmentationError, OSError) as e:
            if token.cancelled:
                logger.info("이전 이미지의 분리 실패 무시: %s", upload.name)
                return False
            self._notify("error", str(e) or "이미지 처리 실패")
            self._background.clear()
            self._foreground.clear()
            return False
        finally:
            if not token.cancelled:
                self.is_processing = False
                self.progress = 0.0

        self._background.replace(background)
        self._foreground.replace(foreground)
        if self._token is token:
            self._token = None
        logger.info("피사체 분리 완료: %s %dx%d", upload.name, *foreground.size)
        self._notify("success", "준비 완료! 텍스트를 추가하고 드래그해서 배치하세요.")
        return True

    async def open_image(self, data: bytes, mime_type: str, name: str = "upload") -> bool:
        """업로드와 분리를 한 번에 수행한다."""
        if self.load_image(data, mime_type, name) is None:
            return False
        return await self.segment()

    # ── 레이어 편집 ──

    def _commit(self, layers) -> None:
        if self._drag.active:
            self._drag.abandon()
        self._history.push(tuple(layers))

    def _sync_selection(self) -> None:
        if self._selected_id is not None and find_layer(self.layers, self._selected_id) is None:
            self._selected_id = None

    def add_layer(self, **overrides) -> TextLayer:
        defaults = {**self._layer_defaults, **overrides}
        layer = create_default_text_layer(**defaults)
        self._commit(self.layers + (layer,))
        self._selected_id = layer.id
        self._notify("success", "텍스트 레이어 추가됨")
        return layer

    def remove_layer(self, layer_id: str) -> bool:
        if find_layer(self.layers, layer_id) is None:
            return False
        session = self._drag.session
        if session is not None and session.layer_id == layer_id:
            self._drag.abandon()
        self._commit(layer for layer in self.layers if layer.id != layer_id)
        if self._selected_id == layer_id:
            self._selected_id = None
        self._notify("success", "레이어 삭제됨")
        return True

    def duplicate_layer(self, layer_id: str) -> TextLayer | None:
        layer = find_layer(self.layers, layer_id)
        if layer is None:
            return None
        clone = duplicate_layer(layer, self._duplicate_offset)
        self._commit(self.layers + (clone,))
        self._selected_id = clone.id
        self._notify("success", "레이어 복제됨")
        return clone

    def update_layer(self, layer_id: str, is_drag: bool = False, **changes) -> bool:
        """레이어 일부 필드를 바꾼다. 없는 id면 아무 일도 하지 않는다."""
        if find_layer(self.layers, layer_id) is None:
            return False
        layers = tuple(
            layer.updated(**changes) if layer.id == layer_id else layer
            for layer in self.layers
        )
        if is_drag:
            self._history.set_present_without_push(layers)
        else:
            self._commit(layers)
        return True

    def select(self, layer_id: str | None) -> None:
        if layer_id is None or find_layer(self.layers, layer_id) is not None:
            self._selected_id = layer_id

    def undo(self) -> None:
        self._drag.abandon()
        self._history.undo()
        self._sync_selection()

    def redo(self) -> None:
        self._drag.abandon()
        self._history.redo()
        self._sync_selection()

    # ── 포인터 / 키보드 ──

    def pointer_down(self, pointer: tuple[float, float]) -> bool:
        return self._drag.begin(pointer, self._selected_id)

    def pointer_move(self, pointer: tuple[float, float],
                     container_size: tuple[float, float]) -> bool:
        return self._drag.move(pointer, container_size) is not None

    def pointer_up(self) -> bool:
        committed = self._drag.end()
        self._sync_selection()
        return committed

    def handle_key(self, event: KeyEvent) -> bool:
        """전역 단축키 처리. 처리했으면 True."""
        action = resolve_shortcut(event)
        if action is ShortcutAction.UNDO:
            self.undo()
        elif action is ShortcutAction.REDO:
            self.redo()
        return action is not None

    # ── 렌더링 / 내보내기 ──

    def _borrow(self, stack: ExitStack, slot: ResourceSlot) -> Image.Image | None:
        resource = slot.current
        if resource is None:
            return None
        return stack.enter_context(resource.borrow())

    def export(self, options: ExportOptions | None = None) -> ExportArtifact | None:
        """배경 → 텍스트 → 피사체 순서로 합성해 내보낸다."""
        options = options or self.export_options
        with ExitStack() as stack:
            background = self._borrow(stack, self._background)
            foreground = self._borrow(stack, self._foreground)
            if background is None:
                self._notify("error", "이미지 처리가 끝날 때까지 기다려 주세요")
                return None
            result = self._compositor.render(
                background, self.layers, foreground, options, backdrop=self.backdrop,
            )
        if not result.ok:
            self._notify("error", result.message)
            return None
        artifact = ExportArtifact(
            filename=options.filename(BEHIND_OBJECT_STEM),
            mime_type=options.mime_type,
            data=result.data,
        )
        logger.info("내보내기: %s (%d bytes)", artifact.filename, len(artifact.data))
        self._notify("success", "이미지 다운로드 준비 완료!")
        return artifact

    def export_overlay(self, options: ExportOptions | None = None) -> ExportArtifact | None:
        """분리 없이 원본 위에 텍스트만 얹어 내보낸다."""
        options = options or self.export_options
        with ExitStack() as stack:
            original = self._borrow(stack, self._original)
            result = self._compositor.render(
                original, self.layers, None, options, require_foreground=False,
            )
        if not result.ok:
            self._notify("error", result.message)
            return None
        return ExportArtifact(
            filename=options.filename(OVERLAY_STEM),
            mime_type=options.mime_type,
            data=result.data,
        )

    def preview(self) -> Image.Image | None:
        """편집 화면용 합성. preview_text_on_top이면 텍스트를 반투명 피사체 위에 그린다."""
        with ExitStack() as stack:
            background = self._borrow(stack, self._background)
            foreground = self._borrow(stack, self._foreground)
            if background is None:
                original = self._borrow(stack, self._original)
                if original is None:
                    return None
                return original.convert("RGBA").copy()
            return self._compositor.compose(
                background, self.layers, foreground,
                backdrop=self.backdrop, text_on_top=self.preview_text_on_top,
            )

    def close(self) -> None:
        """세션 종료. 진행 중인 작업을 무효화하고 자원을 해제한다."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self._drag.abandon()
        self._original.clear()
        self._background.clear()
        self._foreground.clear()
        self._canvas.close()
