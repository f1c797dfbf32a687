"""이미지 자원 수명 테스트."""

from PIL import Image

from editor.resources import ImageResource, ResourceSlot


def test_release_happens_once():
    resource = ImageResource(Image.new("RGB", (2, 2)), "bg")
    resource.release()
    resource.release()
    assert resource.released


def test_release_is_deferred_while_borrowed():
    resource = ImageResource(Image.new("RGB", (2, 2)), "fg")
    with resource.borrow() as img:
        resource.release()
        assert not resource.released
        assert img.size == (2, 2)
    assert resource.released


def test_slot_releases_previous_on_replace():
    slot = ResourceSlot("background")
    first = ImageResource(Image.new("RGB", (2, 2)))
    second = ImageResource(Image.new("RGB", (3, 3)))
    slot.replace(first)
    slot.replace(second)
    assert first.released and not second.released
    slot.clear()
    assert second.released
    assert slot.current is None
