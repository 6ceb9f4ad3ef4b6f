"""Tests for the bounded undo/redo history."""

from quillty.history.operations import AddUnitOperation, RemoveUnitOperation, ResizeGridOperation
from quillty.history.undo_manager import UndoHistory
from tests.conftest import HST, SQUARE


def test_empty_history():
    history = UndoHistory()
    assert not history.can_undo
    assert not history.can_redo
    assert history.undo() is None
    assert history.redo() is None


def test_undo_returns_inverse_and_redo_returns_original():
    op = AddUnitOperation(unit=SQUARE, index=0)
    history = UndoHistory().record(op)
    assert history.can_undo

    history, inverse = history.undo()
    assert inverse == RemoveUnitOperation(unit=SQUARE, index=0)
    assert history.can_redo and not history.can_undo

    history, again = history.redo()
    assert again == op
    assert history.can_undo and not history.can_redo


def test_record_clears_redo():
    history = UndoHistory().record(AddUnitOperation(unit=SQUARE))
    history, _ = history.undo()
    history = history.record(AddUnitOperation(unit=HST))
    assert not history.can_redo
    assert history.undo_stack == (AddUnitOperation(unit=HST),)


def test_oldest_entry_dropped_past_max_size():
    history = UndoHistory(max_size=3)
    for size in range(2, 7):
        history = history.record(ResizeGridOperation(prev_size=size, next_size=size + 1))
    assert len(history.undo_stack) == 3
    assert history.undo_stack[0].prev_size == 4


def test_history_is_immutable():
    empty = UndoHistory()
    recorded = empty.record(AddUnitOperation(unit=SQUARE))
    assert empty.undo_stack == ()
    assert recorded.undo_stack != empty.undo_stack


def test_clear_keeps_max_size():
    history = UndoHistory(max_size=5).record(AddUnitOperation(unit=SQUARE))
    cleared = history.clear()
    assert cleared.max_size == 5
    assert not cleared.can_undo


def test_zero_max_size_keeps_nothing():
    history = UndoHistory(max_size=0)
    for op in (AddUnitOperation(unit=SQUARE), AddUnitOperation(unit=HST)):
        history = history.record(op)
    assert history.undo_stack == ()
    assert not history.can_undo
    assert history.undo() is None


def test_negative_max_size_keeps_nothing():
    history = UndoHistory(max_size=-1).record(AddUnitOperation(unit=SQUARE))
    assert not history.can_undo


def test_custom_inverter_used_on_undo():
    history = UndoHistory(invert=lambda op: ("inverted", op)).record("op")
    _, inverse = history.undo()
    assert inverse == ("inverted", "op")
