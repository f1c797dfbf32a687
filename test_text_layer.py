"""텍스트 레이어 모델 테스트."""

import pytest

from editor.text_layer import (
    Position,
    TextLayer,
    create_default_text_layer,
    duplicate_layer,
    find_layer,
)


def test_default_layer_values():
    layer = create_default_text_layer()
    assert layer.content == "TEXT"
    assert layer.position == Position(0.5, 0.5)
    assert layer.font_size == 100
    assert layer.font_family == "Arial"
    assert layer.font_weight == 700
    assert layer.color == "#fbbf24"
    assert layer.opacity == 1
    assert layer.rotation == 0


def test_ids_are_unique():
    ids = {create_default_text_layer().id for _ in range(100)}
    assert len(ids) == 100


def test_explicit_id_and_overrides():
    layer = create_default_text_layer("fixed", content="HELLO", font_size=40)
    assert layer.id == "fixed"
    assert layer.content == "HELLO"
    assert layer.font_size == 40


def test_duplicate_clamps_and_offsets():
    """(0.98, 0.5) 복제 → (1, 0.55), 새 id."""
    layer = create_default_text_layer().with_position(0.98, 0.5)
    clone = duplicate_layer(layer)
    assert clone.id != layer.id
    assert clone.position.x == 1
    assert clone.position.y == pytest.approx(0.55)
    assert clone.content == layer.content


def test_update_clamps_position_and_keeps_id():
    layer = create_default_text_layer()
    moved = layer.updated(position=(1.7, -0.2), id="other")
    assert moved.position == Position(1.0, 0.0)
    assert moved.id == layer.id
    # 원본은 그대로
    assert layer.position == Position(0.5, 0.5)


def test_empty_content_renders_placeholder():
    layer = TextLayer(content="")
    assert layer.content == ""
    assert layer.display_text() == "TEXT"


def test_find_layer():
    a, b = create_default_text_layer(), create_default_text_layer()
    assert find_layer((a, b), b.id) is b
    assert find_layer((a, b), "missing") is None
    assert find_layer((a, b), None) is None
