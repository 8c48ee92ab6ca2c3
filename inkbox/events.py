"""
Keyboard + timer producers merged into one ordered stream.

Two daemon threads write into a single unbounded queue:
  - the keyboard thread blocks on `read_key(poll_interval)` and posts KeyPress,
  - the ticker thread waits `tick_interval` and posts Tick, forever.

The foreground loop calls `next()` and sees events in arrival order.
Each producer's own events keep their order; there is no priority
between keys and ticks.

If the keyboard read raises, both producers stop and `next()` raises
InputSourceError (after handing out whatever was queued before the failure).
`close()` stops both producers and unblocks `next()` with a Terminated event.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Union
import logging
import queue
import threading

from blessed.keyboard import Keystroke

from .errors import InputSourceError


@dataclass(frozen=True)
class KeyPress:
    key: str  # a single character, or a blessed key name like 'KEY_BACKSPACE'


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Terminated:
    reason: str = "closed"


InputEvent = Union[KeyPress, Tick, Terminated]


@dataclass(frozen=True)
class _InputFailed:
    error: BaseException


ReadKeyFn = Callable[[float], Optional[str]]  # fn(timeout) -> key, or None on timeout


KEY_ALIASES = {'\r': '\n', '\x7f': 'KEY_BACKSPACE', '\x08': 'KEY_BACKSPACE'}


def decode_key(ks: Keystroke) -> str:
    if ks.is_sequence:
        if ks.name == 'KEY_ENTER':
            return '\n'
        return ks.name or str(ks)
    text = str(ks)
    return KEY_ALIASES.get(text, text)


def keyboard_reader(term) -> ReadKeyFn:
    """The input sampler: one blessed `inkey` call per read."""
    def read_key(timeout: float) -> Optional[str]:
        ks = term.inkey(timeout=timeout)
        if not ks:
            return None
        return decode_key(ks)
    return read_key


class EventMultiplexer:
    JOIN_TIMEOUT = 1.0

    def __init__(self, read_key: ReadKeyFn, tick_interval: float = 0.25,
                 poll_interval: float = 0.1, log: Optional[logging.Logger] = None,
                 autostart: bool = True):
        self._read_key = read_key
        self.tick_interval = tick_interval
        self.poll_interval = poll_interval
        self._log = log
        self._queue: 'queue.Queue' = queue.Queue()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._closed = False
        self._finished: Optional[Terminated] = None
        self._threads = []
        self.produced = {"key": 0, "tick": 0}
        if autostart:
            self.start()

    def start(self):
        if self._threads:
            return
        for name, target in (("inkbox-keyboard", self._poll_keyboard), ("inkbox-ticker", self._tick)):
            t = threading.Thread(target=target, name=name, daemon=True)
            t.start()
            self._threads.append(t)

    def post(self, event: InputEvent) -> bool:
        """Channel write. Returns False if the stream is already closed."""
        with self._lock:
            if self._closed:
                return False
            self._queue.put(event)
            if isinstance(event, KeyPress): self.produced["key"] += 1
            elif isinstance(event, Tick): self.produced["tick"] += 1
            return True

    def next(self, timeout: Optional[float] = None) -> Optional[InputEvent]:
        if self._finished:
            return self._finished
        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(event, _InputFailed):
            self._finished = Terminated("input failed")
            raise InputSourceError(f"keyboard read failed: {event.error}") from event.error
        if isinstance(event, Terminated):
            self._finished = event
        return event

    def close(self, reason: str = "closed"):
        with self._lock:
            if not self._closed:
                self._closed = True
                self._queue.put(Terminated(reason))
        self._stop.set()
        for t in self._threads:
            if t is not threading.current_thread():
                t.join(self.JOIN_TIMEOUT)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- producers ---

    def _poll_keyboard(self):
        try:
            while not self._stop.is_set():
                key = self._read_key(self.poll_interval)
                if key:
                    self.post(KeyPress(key))
        except Exception as e:
            self._fail(e)

    def _tick(self):
        while not self._stop.wait(self.tick_interval):
            self.post(Tick())

    def _fail(self, error: BaseException):
        if self._log:
            self._log.error("keyboard producer stopped: %r", error)
        with self._lock:
            if not self._closed:
                self._closed = True
                self._queue.put(_InputFailed(error))
        self._stop.set()
