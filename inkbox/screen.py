"""
Drawing: a cell grid that is filled each frame and flushed in one write.

Layout is an input box of fixed height on top of a message list.
"""
from typing import List, Optional, Tuple, Union

from wcwidth import wcwidth

from .state import Snapshot

Rect = Tuple[int, int, int, int]  # (x, y, w, h)
RegionLike = Union['Region', Rect]

# second half of a double-width glyph; flushes as nothing
_WIDE_TAIL = ''


class ScreenBuffer:
    def __init__(self, w, h):
        self.w, self.h = w, h
        self.chars = [[' '] * w for _ in range(h)]
        self.styles: List[List[Optional[str]]] = [[None] * w for _ in range(h)]
        self.txt_colors: List[List[Optional[str]]] = [[None] * w for _ in range(h)]

    def put(self, x, y, char, style=None, txt_color=None):
        if 0 <= x < self.w and 0 <= y < self.h:
            self.chars[y][x] = char
            self.styles[y][x] = style
            self.txt_colors[y][x] = txt_color

    def puts(self, x, y, text, style=None, txt_color=None, limit=None) -> int:
        """Write `text` from (x, y), stopping at `limit` cells. Returns cells used."""
        col = 0
        for c in text:
            cw = max(wcwidth(c), 0)
            if limit is not None and col + cw > limit:
                break
            if cw == 0:
                continue
            self.put(x + col, y, c, style, txt_color)
            if cw == 2:
                self.put(x + col + 1, y, _WIDE_TAIL, style, txt_color)
            col += cw
        return col

    def clear(self):
        for row in self.chars: row[:] = [' '] * self.w
        for row in self.styles: row[:] = [None] * self.w
        for row in self.txt_colors: row[:] = [None] * self.w

    def render(self, term) -> str:
        out = term.home
        for y in range(self.h):
            for x in range(self.w):
                c = self.chars[y][x]
                parts = [p for p in [self.txt_colors[y][x], self.styles[y][x]] if p]
                attr = "_".join(parts) if parts else None
                styled = getattr(term, attr, None) if attr else None
                out += styled(c) if styled and c else c
        return out

    def flush(self, term):
        # write errors propagate; a frame that can't be drawn is fatal
        term.stream.write(self.render(term))
        term.stream.flush()

    def rect_line(self, r: Rect, style=None, txt_color=None):
        x, y, w, h = r
        if w < 2 or h < 2: return
        for col in range(x + 1, x + w - 1):
            self.put(col, y, '─', style, txt_color)
            self.put(col, y + h - 1, '─', style, txt_color)
        for row in range(y + 1, y + h - 1):
            self.put(x, row, '│', style, txt_color)
            self.put(x + w - 1, row, '│', style, txt_color)
        self.put(x, y, '┌', style, txt_color)
        self.put(x + w - 1, y, '┐', style, txt_color)
        self.put(x, y + h - 1, '└', style, txt_color)
        self.put(x + w - 1, y + h - 1, '┘', style, txt_color)

    def text_contained(self, txt: str, r: Rect, style=None, txt_color=None) -> int:
        """Single-line text clipped to r. Newlines become spaces."""
        x, y, w, h = r
        if h < 1: return 0
        txt = txt.replace('\r\n', ' ').replace('\r', ' ').replace('\n', ' ')
        self.puts(x, y, txt, style, txt_color, limit=w)
        return 1


class Region(tuple):
    """
    A class reprenting a (x,y,w,h) area on the screen.
    Used for laying out ui.
    """
    def __new__(cls, x: int = 0, y: int = 0, w: int = 0, h: int = 0):
        return super().__new__(cls, (int(x), int(y), max(0, int(w)), max(0, int(h))))

    def __repr__(self):
        return f"Region{super().__repr__()}"

    def split_fixed(self, height: int) -> Tuple['Region', 'Region']:
        """Top region of exactly `height` rows (if it fits), and the rest."""
        top_h = min(height, self[3])
        return (Region(self[0], self[1], self[2], top_h),
                Region(self[0], self[1] + top_h, self[2], self[3] - top_h))

    def shrink(self, left: int, top: Optional[int] = None, right: Optional[int] = None, bottom: Optional[int] = None) -> 'Region':
        top = top if top is not None else left
        right = right if right is not None else left
        bottom = bottom if bottom is not None else top
        return Region(
            self[0] + left,
            self[1] + top,
            self[2] - left - right,
            self[3] - top - bottom
        )


def layout(term_r: RegionLike, margin: int = 2, input_height: int = 3) -> Tuple[Region, Region]:
    return Region(*term_r).shrink(margin).split_fixed(input_height)


def _tail_fitting(term, text: str, width: int) -> str:
    # drop characters from the front until the rest fits
    start = 0
    while start < len(text) and term.length(text[start:]) > width:
        start += 1
    return text[start:]


def draw(buf: ScreenBuffer, snap: Snapshot, input_r: Region, messages_r: Region, term) -> Tuple[int, int]:
    """Draw one frame into buf. Returns where the cursor belongs."""
    x, y, w, h = input_r
    buf.rect_line(input_r)
    buf.puts(x + 2, y, "Input", limit=max(w - 4, 0))
    visible = _tail_fitting(term, snap.buffer, max(w - 2, 0))
    buf.puts(x + 1, y + 1, visible, txt_color='yellow', limit=max(w - 2, 0))

    mx, my, mw, mh = messages_r
    buf.rect_line(messages_r)
    buf.puts(mx + 2, my, "Messages", limit=max(mw - 4, 0))
    rows = max(mh - 2, 0)
    first = max(len(snap.history) - rows, 0)
    for row, i in enumerate(range(first, len(snap.history))):
        buf.text_contained(f"{i}: {snap.history[i]}", (mx + 1, my + 1 + row, mw - 2, 1))

    return x + 1 + term.length(visible), y + 1


def place_cursor(term, x: int, y: int):
    term.stream.write(term.move_xy(x, y))
    term.stream.flush()
