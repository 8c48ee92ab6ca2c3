"""Tests for the keyboard/timer event multiplexer."""
import threading
import time

import pytest
from blessed.keyboard import Keystroke

from inkbox.errors import InputSourceError
from inkbox.events import (EventMultiplexer, KeyPress, Terminated, Tick,
                           decode_key, keyboard_reader)


def _idle_reader(timeout):
    time.sleep(timeout)
    return None


def test_decode_key():
    assert decode_key(Keystroke('a')) == 'a'
    assert decode_key(Keystroke('\r')) == '\n'
    assert decode_key(Keystroke('\n')) == '\n'
    assert decode_key(Keystroke('\x7f')) == 'KEY_BACKSPACE'
    assert decode_key(Keystroke('\x1b[D', code=260, name='KEY_LEFT')) == 'KEY_LEFT'
    assert decode_key(Keystroke('\x0d', code=343, name='KEY_ENTER')) == '\n'
    assert decode_key(Keystroke('\x7f', code=263, name='KEY_BACKSPACE')) == 'KEY_BACKSPACE'


def test_keyboard_reader_wraps_inkey():
    class FakeTerm:
        def __init__(self, keys):
            self.keys = list(keys)
            self.timeouts = []

        def inkey(self, timeout=None):
            self.timeouts.append(timeout)
            return self.keys.pop(0) if self.keys else Keystroke('')

    t = FakeTerm([Keystroke('x'), Keystroke('\r')])
    read = keyboard_reader(t)
    assert read(0.1) == 'x'
    assert read(0.1) == '\n'
    assert read(0.1) is None
    assert t.timeouts == [0.1, 0.1, 0.1]


def test_posted_events_keep_order():
    mux = EventMultiplexer(_idle_reader, autostart=False)
    produced = [Tick(), KeyPress('a'), KeyPress('b'), Tick(), KeyPress('c')]
    for e in produced:
        assert mux.post(e)
    got = [mux.next(timeout=1) for _ in produced]
    assert got == produced
    assert mux.next(timeout=0.01) is None


def test_next_times_out_with_none():
    mux = EventMultiplexer(_idle_reader, autostart=False)
    assert mux.next(timeout=0.01) is None


def test_ticker_produces_ticks():
    with EventMultiplexer(_idle_reader, tick_interval=0.01, poll_interval=0.01) as mux:
        assert mux.next(timeout=2) == Tick()
        assert mux.next(timeout=2) == Tick()


def test_close_unblocks_next_with_terminated():
    mux = EventMultiplexer(_idle_reader, tick_interval=60, poll_interval=0.01)
    got = []
    consumer = threading.Thread(target=lambda: got.append(mux.next()))
    consumer.start()
    time.sleep(0.05)
    mux.close("quit")
    consumer.join(2)
    assert got == [Terminated("quit")]
    # stays terminated, never blocks again
    assert mux.next() == Terminated("quit")
    assert not mux.post(KeyPress('a'))


def test_close_is_idempotent_and_stops_threads():
    mux = EventMultiplexer(_idle_reader, tick_interval=0.01, poll_interval=0.01)
    mux.close()
    mux.close()
    assert mux.closed
    assert all(not t.is_alive() for t in mux._threads)


def test_keyboard_failure_surfaces_as_error():
    def broken(timeout):
        raise OSError("device gone")

    mux = EventMultiplexer(broken, tick_interval=60)
    with pytest.raises(InputSourceError) as info:
        mux.next(timeout=2)
    assert isinstance(info.value.__cause__, OSError)
    assert mux.next() == Terminated("input failed")
    mux.close()


def test_events_before_failure_are_delivered_first():
    keys = iter("ab")

    def flaky(timeout):
        try:
            return next(keys)
        except StopIteration:
            raise EOFError("stdin closed") from None

    mux = EventMultiplexer(flaky, tick_interval=60)
    assert mux.next(timeout=2) == KeyPress('a')
    assert mux.next(timeout=2) == KeyPress('b')
    with pytest.raises(InputSourceError):
        mux.next(timeout=2)
    mux.close()


def test_failure_is_logged():
    class Log:
        def __init__(self):
            self.errors = []

        def error(self, msg, *args):
            self.errors.append(msg % args)

    def broken(timeout):
        raise OSError("nope")

    log = Log()
    mux = EventMultiplexer(broken, tick_interval=60, log=log)
    with pytest.raises(InputSourceError):
        mux.next(timeout=2)
    assert log.errors and "nope" in log.errors[0]


def test_concurrent_producers_conserve_events():
    n = 1000
    remaining = iter(str(i % 10) for i in range(n))
    done = threading.Event()

    def fast_keys(timeout):
        try:
            return next(remaining)
        except StopIteration:
            done.set()
            time.sleep(timeout)
            return None

    mux = EventMultiplexer(fast_keys, tick_interval=0.005, poll_interval=0.01)
    keys, ticks = [], 0
    while len(keys) < n:
        e = mux.next(timeout=5)
        assert e is not None
        if isinstance(e, KeyPress):
            keys.append(e.key)
        else:
            assert e == Tick()
            ticks += 1
    mux.close()
    # drain up to the Terminated marker
    while True:
        e = mux.next(timeout=5)
        if isinstance(e, Terminated):
            break
        assert e == Tick()
        ticks += 1

    assert keys == [str(i % 10) for i in range(n)]
    assert mux.produced == {"key": n, "tick": ticks}
