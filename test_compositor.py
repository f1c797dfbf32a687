"""레이어 합성 테스트 — 배경 → 텍스트 → 전경 순서와 거부 처리."""

from io import BytesIO

from PIL import Image

import renderer.layers as layers_mod
from content.background import BackdropMode, BackdropSpec
from editor.errors import ExportError
from editor.text_layer import create_default_text_layer
from renderer.canvas import Canvas
from renderer.export import ExportFormat, ExportOptions
from renderer.layers import LayerCompositor, RefusalReason

RED = (255, 0, 0, 255)
BLUE = "#0000ff"
SQUARE = (300, 200, 500, 400)  # 전경 피사체 영역 (800x600 중앙)


def _background(size=(800, 600), color=(255, 255, 255, 255)):
    return Image.new("RGBA", size, color)


def _foreground(size=(800, 600)):
    fg = Image.new("RGBA", size, (0, 0, 0, 0))
    fg.paste(Image.new("RGBA", (SQUARE[2] - SQUARE[0], SQUARE[3] - SQUARE[1]), RED),
             SQUARE[:2])
    return fg


def _decode(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


def test_render_is_deterministic():
    compositor = LayerCompositor(Canvas())
    layers = (create_default_text_layer("a", content="HELLO", rotation=15, opacity=0.7),)
    opts = ExportOptions()
    first = compositor.render(_background(), layers, _foreground(), opts)
    second = compositor.render(_background(), layers, _foreground(), opts)
    assert first.ok and second.ok
    assert first.data == second.data


def test_render_does_not_mutate_layers():
    compositor = LayerCompositor(Canvas())
    layers = (create_default_text_layer("a"), create_default_text_layer("b"))
    snapshot = tuple(layers)
    compositor.render(_background(), layers, _foreground(), ExportOptions())
    assert layers == snapshot


def test_refuses_without_foreground():
    compositor = LayerCompositor(Canvas())
    result = compositor.render(_background(), (), None, ExportOptions())
    assert not result.ok
    assert result.refusal is RefusalReason.MISSING_FOREGROUND
    assert result.data is None
    assert result.message


def test_refuses_without_background():
    compositor = LayerCompositor(Canvas())
    result = compositor.render(None, (), _foreground(), ExportOptions())
    assert result.refusal is RefusalReason.MISSING_BACKGROUND


def test_refuses_zero_dimension_source():
    compositor = LayerCompositor(Canvas())
    result = compositor.render(Image.new("RGBA", (0, 0)), (), _foreground(), ExportOptions())
    assert result.refusal is RefusalReason.ZERO_DIMENSION
    assert result.data is None


def test_encoder_failure_is_distinct_refusal(monkeypatch):
    def broken(image, options):
        raise ExportError("boom")

    monkeypatch.setattr(layers_mod, "encode", broken)
    compositor = LayerCompositor(Canvas())
    result = compositor.render(_background(), (), _foreground(), ExportOptions())
    assert result.refusal is RefusalReason.ENCODE_FAILED
    assert result.data is None


def test_foreground_occludes_text_behind_it():
    """800x600, 'HELLO' (0.5, 0.5) 크기 100: 피사체 안은 빨강, 밖에서만 텍스트가 보인다."""
    compositor = LayerCompositor(Canvas())
    layer = create_default_text_layer(content="HELLO", font_size=100, color=BLUE)
    result = compositor.render(_background(), (layer,), _foreground(), ExportOptions())
    img = _decode(result.data).convert("RGBA")
    assert img.size == (800, 600)

    inside = img.crop(SQUARE)
    assert inside.getcolors() == [(inside.width * inside.height, RED)]

    blue_outside = 0
    band = img.crop((0, 200, 800, 400))
    for i, (r, g, b, a) in enumerate(band.getdata()):
        x = i % band.width
        if SQUARE[0] <= x < SQUARE[2]:
            continue
        if b > 200 and r < 80 and g < 80:
            blue_outside += 1
    assert blue_outside > 0


def test_jpeg_fills_transparent_areas_white():
    compositor = LayerCompositor(Canvas())
    clear = Image.new("RGBA", (40, 30), (0, 0, 0, 0))
    result = compositor.render(clear, (), clear.copy(),
                               ExportOptions(format=ExportFormat.JPEG, quality=1.0))
    img = _decode(result.data)
    assert img.mode == "RGB"
    assert all(channel >= 245 for channel in img.getpixel((20, 15)))


def test_solid_backdrop_replaces_background():
    compositor = LayerCompositor(Canvas())
    spec = BackdropSpec(mode=BackdropMode.SOLID, solid_color="#00ff00")
    composed = compositor.compose(_background((50, 50), (9, 9, 9, 255)), (),
                                  Image.new("RGBA", (50, 50), (0, 0, 0, 0)), backdrop=spec)
    assert composed.getpixel((10, 10)) == (0, 255, 0, 255)


def test_text_paints_in_list_order():
    compositor = LayerCompositor(Canvas())
    under = create_default_text_layer(content="HELLO", color="#ff0000", font_size=60)
    over = create_default_text_layer(content="HELLO", color="#00ff00", font_size=60)
    composed = compositor.compose(_background((300, 200)), (under, over))
    counts = {color: n for n, color in composed.getcolors(300 * 200)}
    assert counts.get((0, 255, 0, 255), 0) > 0
    assert counts.get((255, 0, 0, 255), 0) == 0


def test_preview_puts_text_above_translucent_foreground():
    compositor = LayerCompositor(Canvas())
    layer = create_default_text_layer(content="HELLO", color=BLUE)
    composed = compositor.compose(_background(), (layer,), _foreground(), text_on_top=True)
    # 피사체는 60% 불투명도로 흰 배경과 섞인다
    r, g, b, a = composed.getpixel((SQUARE[0] + 2, SQUARE[1] + 2))
    assert r == 255 and 90 <= g <= 115
