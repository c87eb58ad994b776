"""Tests for the emitter module."""

from unittest.mock import Mock, call

from aws_sdk_common_python.command import Command, Transaction
from aws_sdk_common_python.emitter import ERROR, INIT, PROCESS, Emitter


def _transaction() -> Transaction:
    return Transaction(Mock(), Command("ListThings"))


def test_emit_calls_listeners_in_order():
    """Test listeners are called in the order they were added."""
    calls = Mock()
    emitter = Emitter()
    emitter.on(INIT, calls.first)
    emitter.on(INIT, calls.second)
    transaction = _transaction()

    emitter.emit(INIT, transaction)

    assert calls.mock_calls == [call.first(transaction), call.second(transaction)]


def test_emit_only_matching_event():
    """Test listeners of other events are not called."""
    listener = Mock()
    emitter = Emitter()
    emitter.on(PROCESS, listener)

    emitter.emit(ERROR, _transaction())

    listener.assert_not_called()


def test_remove():
    """Test removed listeners are not called and unknown listeners are ignored."""
    listener = Mock()
    emitter = Emitter()
    emitter.on(INIT, listener)
    emitter.remove(INIT, listener)
    emitter.remove(INIT, Mock())
    emitter.remove(ERROR, listener)

    emitter.emit(INIT, _transaction())

    listener.assert_not_called()
    assert not emitter.has_listeners(INIT)


def test_listeners_returns_copy():
    """Test the listener list can't be changed from outside."""
    emitter = Emitter()
    emitter.on(INIT, Mock())
    emitter.listeners(INIT).clear()
    assert len(emitter.listeners(INIT)) == 1


def test_copy_is_independent():
    """Test listeners added to a copy don't leak into the original and vice versa."""
    original_listener = Mock()
    original = Emitter()
    original.on(INIT, original_listener)

    clone = original.copy()
    clone_listener = Mock()
    clone.on(INIT, clone_listener)
    original.on(ERROR, Mock())

    assert clone.listeners(INIT) == [original_listener, clone_listener]
    assert original.listeners(INIT) == [original_listener]
    assert not clone.has_listeners(ERROR)


def test_listener_may_edit_params():
    """Test init listeners can change command parameters."""
    emitter = Emitter()
    emitter.on(INIT, lambda t: t.command.params.update({"Added": True}))
    transaction = _transaction()

    emitter.emit(INIT, transaction)

    assert transaction.command.params == {"Added": True}
