"""히스토리(undo/redo) 테스트."""

from editor.history import MAX_HISTORY_SIZE, History


def test_past_is_bounded_to_most_recent_states():
    history = History(0)
    for i in range(1, 61):
        history.push(i)
    assert len(history.past) == MAX_HISTORY_SIZE == 50
    assert history.past == list(range(10, 60))
    assert history.present == 60


def test_undo_then_redo_restores_present():
    history = History(("a",))
    history.push(("a", "b"))
    history.push(("a", "b", "c"))
    before = history.present
    history.undo()
    assert history.present == ("a", "b")
    assert history.future == [before]
    history.redo()
    assert history.present == before
    assert history.future == []


def test_push_after_undo_discards_redo_path():
    history = History(1)
    history.push(2)
    history.push(3)
    history.undo()
    history.push(4)
    assert history.future == []
    assert not history.can_redo
    history.redo()
    assert history.present == 4
    assert history.past == [1, 2]


def test_boundaries_are_noops():
    history = History("start")
    history.undo()
    history.redo()
    assert history.present == "start"
    assert history.past == [] and history.future == []
    assert not history.can_undo and not history.can_redo


def test_undo_orders_future_front_first():
    history = History(0)
    for i in (1, 2, 3):
        history.push(i)
    history.undo()
    history.undo()
    assert history.present == 1
    assert history.future == [2, 3]
    history.redo()
    assert history.present == 2


def test_set_present_without_push_leaves_past_untouched():
    history = History(0)
    history.push(1)
    history.set_present_without_push(5)
    history.set_present_without_push(6)
    assert history.past == [0]
    assert history.present == 6


def test_reset_clears_everything():
    history = History(0)
    history.push(1)
    history.push(2)
    history.undo()
    history.reset(9)
    assert history.present == 9
    assert history.past == [] and history.future == []


def test_snapshot_prevents_aliasing_live_list():
    live = ["x"]
    history = History([], snapshot=tuple)
    history.push(live)
    live.append("y")
    assert history.present == ("x",)
    assert history.past == [()]
