"""메인 실행 — 이미지 하나에 텍스트를 피사체 뒤로 합성해 저장한다."""

import argparse
import asyncio
import logging
from pathlib import Path

from config import load_config
from content.segmentation import create_segmenter
from content.upload import guess_mime_type
from editor.session import EditorSession
from editor.text_layer import FONT_WEIGHTS
from renderer.text import FONT_FAMILIES, add_font_directory


def _parse_pos(s: str) -> tuple[float, float]:
    try:
        x, y = (float(v) for v in s.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"위치는 'x,y' 형식이어야 합니다 (입력: {s!r})")
    return x, y


def _parse_quality(s: str) -> float:
    try:
        quality = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"품질은 숫자여야 합니다 (입력: {s!r})")
    if not 0 < quality <= 1:
        raise argparse.ArgumentTypeError(f"품질은 (0, 1] 범위여야 합니다 (입력: {s!r})")
    return quality


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="텍스트를 사진 속 피사체 뒤에 배치한다.")
    p.add_argument("input", type=Path, help="입력 이미지 경로")
    p.add_argument("-o", "--output-dir", type=Path, default=Path("."), help="저장 디렉토리")
    p.add_argument("--config", type=Path, default=None, help="config.json 경로")
    p.add_argument("--text", action="append", default=[], help="텍스트 레이어 (여러 번 지정 가능)")
    p.add_argument("--pos", type=_parse_pos, action="append", default=[],
                   help="정규화 위치 'x,y' (--text와 순서대로 대응)")
    p.add_argument("--font-size", type=float, default=None)
    p.add_argument("--font-family", default=None, choices=[name for name, _ in FONT_FAMILIES])
    p.add_argument("--font-weight", type=int, default=None, choices=FONT_WEIGHTS)
    p.add_argument("--color", default=None)
    p.add_argument("--opacity", type=float, default=None)
    p.add_argument("--rotation", type=float, default=None)
    p.add_argument("--backdrop", choices=["original", "solid", "gradient", "blur"], default=None)
    p.add_argument("--format", choices=["png", "jpeg", "webp"], default=None)
    p.add_argument("--quality", type=_parse_quality, default=None, help="JPEG/WebP 품질 (0, 1]")
    p.add_argument("--overlay", action="store_true",
                   help="피사체 분리 없이 텍스트를 위에 얹기만 한다")
    p.add_argument("-v", "--verbose", action="store_true", help="디버그 로그")
    return p.parse_args(argv)


def _layer_overrides(args: argparse.Namespace) -> dict:
    names = ("font_size", "font_family", "font_weight", "color", "opacity", "rotation")
    overrides = {name: getattr(args, name) for name in names if getattr(args, name) is not None}
    if "font_family" in overrides:
        overrides["font_family"] = dict(FONT_FAMILIES)[overrides["font_family"]]
    return overrides


async def run(args: argparse.Namespace, config: dict) -> int:
    if args.backdrop:
        config["backdrop"]["mode"] = args.backdrop
    if args.format:
        config["export"]["format"] = args.format
    if args.quality is not None:
        config["export"]["quality"] = args.quality

    add_font_directory(config["fonts"]["directory"])
    try:
        session = EditorSession(create_segmenter(config["segmentation"]), config)
    except ValueError as e:
        logging.error("설정 오류: %s", e)
        return 1

    try:
        data = args.input.read_bytes()
        mime_type = guess_mime_type(args.input.name)
        if args.overlay:
            ok = session.load_image(data, mime_type, args.input.name) is not None
        else:
            ok = await session.open_image(data, mime_type, args.input.name)
        if not ok:
            return 1

        overrides = _layer_overrides(args)
        for i, text in enumerate(args.text or ["TEXT"]):
            layer = session.add_layer(content=text, **overrides)
            if i < len(args.pos):
                session.update_layer(layer.id, position=args.pos[i])

        artifact = session.export_overlay() if args.overlay else session.export()
        if artifact is None:
            return 1

        args.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = args.output_dir / artifact.filename
        out_path.write_bytes(artifact.data)
        logging.info("저장 완료: %s (%s)", out_path, artifact.mime_type)
        return 0
    finally:
        session.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    level = logging.DEBUG if args.verbose else config["logging"]["level"]
    logging.basicConfig(level=level, format="%(asctime)s [%(name)s] %(message)s")
    logging.getLogger("onnxruntime").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        logging.info("종료")
