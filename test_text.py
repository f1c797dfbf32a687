"""텍스트 렌더링 테스트 — 폰트 대체, 줄바꿈, 최대 폭."""

from renderer.layout import safe_text_width
from renderer.text import get_font, parse_color, render_text, wrap_text


def test_unknown_family_degrades_to_a_usable_font():
    font = get_font("No Such Family, fantasy", 400, 24)
    assert font.getlength("abc") > 0


def test_wrap_breaks_on_words():
    font = get_font("Arial", 400, 20)
    lines = wrap_text("one two three four five six", font, font.getlength("one two") + 1)
    assert len(lines) > 1
    assert " ".join(lines) == "one two three four five six"


def test_render_respects_max_width():
    font = get_font("Arial", 700, 40)
    img = render_text("SUPERCALIFRAGILISTIC", font, max_width=60)
    assert img.mode == "RGBA"
    assert img.width == 60


def test_opacity_scales_alpha():
    font = get_font("Arial", 700, 40)
    solid = render_text("H", font)
    faded = render_text("H", font, opacity=0.5)
    assert max(faded.getchannel("A").getdata()) <= max(solid.getchannel("A").getdata()) // 2 + 1


def test_invalid_color_falls_back():
    assert parse_color("#00ff00") == (0, 255, 0)
    assert parse_color("not-a-color") == (251, 191, 36)


def test_safe_text_width_has_floor():
    assert safe_text_width(800) == 760
    assert safe_text_width(30) == 20


def test_default_font_renders_multiline_block():
    font = get_font("No Such Family", 400, 30)
    img = render_text("AB\nCD", font)
    ascent, descent = font.getmetrics()
    assert img.height > 2 * (ascent + descent)
