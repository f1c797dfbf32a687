"""배경(backdrop) 생성 테스트."""

from PIL import Image

from content.background import (
    BackdropMode,
    BackdropSpec,
    GradientDirection,
    linear_gradient,
    render_backdrop,
)

START = (0, 0, 0, 255)
END = (255, 255, 255, 255)


def test_top_bottom_gradient():
    img = linear_gradient((10, 11), "#000000", "#ffffff", GradientDirection.TOP_BOTTOM)
    assert img.getpixel((5, 0)) == START
    assert img.getpixel((5, 10)) == END
    assert img.getpixel((0, 5)) == img.getpixel((9, 5))


def test_left_right_gradient():
    img = linear_gradient((11, 10), "#000000", "#ffffff", "left-right")
    assert img.getpixel((0, 5)) == START
    assert img.getpixel((10, 5)) == END
    assert img.getpixel((5, 0)) == img.getpixel((5, 9))


def test_diagonal_gradient_runs_corner_to_corner():
    img = linear_gradient((40, 20), "#000000", "#ffffff", GradientDirection.DIAGONAL)
    assert img.getpixel((0, 0)) == START
    r, g, b, _ = img.getpixel((39, 19))
    assert r > 240
    mid = img.getpixel((20, 10))[0]
    assert 100 < mid < 160


def test_solid_and_original_modes():
    source = Image.new("RGB", (8, 6), (10, 20, 30))
    solid = render_backdrop(BackdropSpec(mode=BackdropMode.SOLID, solid_color="#ff8800"), source)
    assert solid.size == (8, 6)
    assert solid.getpixel((3, 3)) == (255, 136, 0, 255)

    original = render_backdrop(BackdropSpec(), source)
    assert original.mode == "RGBA"
    assert original.getpixel((3, 3)) == (10, 20, 30, 255)


def test_blur_smooths_edges_and_keeps_size():
    source = Image.new("RGB", (40, 40), (0, 0, 0))
    source.paste((255, 255, 255), (20, 0, 40, 40))
    spec = BackdropSpec(mode=BackdropMode.BLUR, blur_radius=4)
    out = render_backdrop(spec, source)
    assert out.size == (40, 40)
    edge = out.getpixel((20, 20))[0]
    assert 0 < edge < 255


def test_spec_from_config():
    spec = BackdropSpec.from_config({"mode": "gradient", "gradient_direction": "diagonal"})
    assert spec.mode is BackdropMode.GRADIENT
    assert spec.gradient_direction is GradientDirection.DIAGONAL
    assert spec.blur_radius == 12
