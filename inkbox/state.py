from dataclasses import dataclass
from typing import List, Tuple
import threading


@dataclass(frozen=True)
class Snapshot:
    buffer: str
    history: Tuple[str, ...]


class ApplicationState:
    """
    The input buffer and the message history.

    Everything goes through one lock, so a reader never sees a commit
    half-done (buffer cleared but the entry not yet in history).
    """
    NEWLINES = ('\n', '\r')

    def __init__(self, commit_empty: bool = True):
        self.commit_empty = commit_empty
        self._buffer: List[str] = []
        self._history: List[str] = []
        self._lock = threading.Lock()

    def push_char(self, c: str):
        chars = [ch for ch in c if ch not in self.NEWLINES]
        with self._lock:
            self._buffer.extend(chars)

    def pop_char(self):
        with self._lock:
            if self._buffer:
                self._buffer.pop()

    def commit(self) -> str:
        """Move the buffer into a new history entry. Returns the entry."""
        with self._lock:
            entry = "".join(self._buffer)
            if not entry and not self.commit_empty:
                return entry
            self._history.append(entry)
            self._buffer.clear()
            return entry

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot("".join(self._buffer), tuple(self._history))
