"""
Unit tests for event hooks and cancellation tokens.
"""

import threading
import time

import pytest

from erth_sdk.cancellation import CancelToken
from erth_sdk.errors import OperationCancelledError
from erth_sdk.events import EventEmitter, EventType


class TestEventEmitter:

    @pytest.mark.unit
    def test_decorator_registration(self):
        emitter = EventEmitter()
        seen = []

        @emitter.on(EventType.AFTER_BROADCAST)
        def on_broadcast(event):
            seen.append(event.data["tx_hash"])

        emitter.emit(EventType.AFTER_BROADCAST, {"tx_hash": "ABC"})
        emitter.emit(EventType.BEFORE_SIGN, {"tx_hash": "IGNORED"})

        assert seen == ["ABC"]
        assert emitter.handler_count(EventType.AFTER_BROADCAST) == 1

    @pytest.mark.unit
    def test_global_handler_sees_everything(self):
        emitter = EventEmitter()
        seen = []
        emitter.add_global_handler(lambda e: seen.append(e.type))

        emitter.emit(EventType.STATE_CHANGED)
        emitter.emit(EventType.TX_CONFIRMED)

        assert seen == [EventType.STATE_CHANGED, EventType.TX_CONFIRMED]

    @pytest.mark.unit
    def test_handler_results_collected(self):
        emitter = EventEmitter()
        emitter.add_handler(EventType.BEFORE_ENCRYPT, lambda e: "ok")
        emitter.add_handler(EventType.BEFORE_ENCRYPT, lambda e: None)

        assert emitter.emit(EventType.BEFORE_ENCRYPT) == ["ok"]

    @pytest.mark.unit
    def test_handler_error_is_isolated(self):
        """Test a failing handler reports ON_ERROR and later handlers still run."""
        emitter = EventEmitter()
        errors = []
        later = []

        def broken(event):
            raise RuntimeError("handler bug")

        emitter.add_handler(EventType.BEFORE_BROADCAST, broken)
        emitter.add_handler(EventType.BEFORE_BROADCAST, lambda e: later.append(True))
        emitter.add_handler(EventType.ON_ERROR, lambda e: errors.append(e.data))

        emitter.emit(EventType.BEFORE_BROADCAST)

        assert later == [True]
        assert errors[0]["error_type"] == "RuntimeError"
        assert errors[0]["source_event"] == "before_broadcast"

    @pytest.mark.unit
    def test_remove_and_clear(self):
        emitter = EventEmitter()
        handler = lambda e: None
        emitter.add_handler(EventType.ON_RETRY, handler)
        emitter.add_global_handler(handler)

        assert emitter.remove_handler(EventType.ON_RETRY, handler) is True
        assert emitter.remove_handler(EventType.ON_RETRY, handler) is False

        emitter.clear()
        assert emitter.handler_count() == 0


class TestCancelToken:

    @pytest.mark.unit
    def test_check_raises_after_cancel(self):
        token = CancelToken()
        token.check("step")
        token.cancel("user abort")

        with pytest.raises(OperationCancelledError, match="user abort during broadcasting"):
            token.check("broadcasting")

    @pytest.mark.unit
    def test_deadline(self):
        token = CancelToken(timeout=0.05)
        assert not token.cancelled
        time.sleep(0.1)
        assert token.cancelled
        with pytest.raises(OperationCancelledError, match="deadline"):
            token.check()

    @pytest.mark.unit
    def test_sleep_wakes_on_cancel(self):
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()

        start = time.monotonic()
        assert token.sleep(10) is False
        assert time.monotonic() - start < 5

    @pytest.mark.unit
    def test_sleep_completes(self):
        assert CancelToken().sleep(0.01) is True

    @pytest.mark.unit
    def test_clip(self):
        assert CancelToken().clip(30) == 30
        assert CancelToken(timeout=1).clip(30) <= 1
        assert CancelToken(timeout=60).remaining() > 59

    @pytest.mark.unit
    def test_child_takes_earlier_deadline(self):
        parent = CancelToken(timeout=1)
        assert parent.child(30).remaining() <= 1
        assert parent.child(0.5).remaining() <= 0.5
        assert CancelToken().child(5).remaining() <= 5
        assert CancelToken().child().remaining() is None

    @pytest.mark.unit
    def test_cancel_reaches_child(self):
        parent = CancelToken()
        child = parent.child(60)
        threading.Timer(0.05, parent.cancel, args=("user abort",)).start()

        assert child.sleep(10) is False
        assert child.reason == "user abort"

    @pytest.mark.unit
    def test_child_of_cancelled_parent(self):
        parent = CancelToken()
        parent.cancel()
        with pytest.raises(OperationCancelledError):
            parent.child(10).check("lookup")

    @pytest.mark.unit
    def test_child_cancel_leaves_parent(self):
        parent = CancelToken()
        parent.child().cancel()
        assert not parent.cancelled
