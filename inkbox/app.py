"""
inkbox: type into the input box, Enter moves the line into the message list.

    q          quit
    Enter      commit the input line
    Backspace  delete the last character
"""
import enum
import logging
import sys
from typing import Optional

from blessed import Terminal

from .config import Config
from .errors import InkboxError
from .events import EventMultiplexer, InputEvent, KeyPress, Terminated, keyboard_reader
from .log import close_log, open_log
from .screen import Region, ScreenBuffer, draw, layout, place_cursor
from .state import ApplicationState

CTRL_C = '\x03'


class LoopState(enum.Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


def handle_event(state: ApplicationState, event: InputEvent, quit_key: str = "q") -> LoopState:
    """Apply one event to the state. Ticks and unknown keys change nothing."""
    if isinstance(event, Terminated):
        return LoopState.TERMINATED
    if not isinstance(event, KeyPress):
        return LoopState.RUNNING

    key = event.key
    if key == quit_key or key == CTRL_C:
        return LoopState.TERMINATED
    if key == '\n':
        state.commit()
    elif key == 'KEY_BACKSPACE':
        state.pop_char()
    elif len(key) == 1 and key.isprintable():
        state.push_char(key)
    return LoopState.RUNNING


def run_loop(term, state: ApplicationState, events, log: Optional[logging.Logger], config: Config):
    buf = ScreenBuffer(term.width, term.height)
    loop_state = LoopState.RUNNING
    while loop_state is LoopState.RUNNING:
        if buf.w != term.width or buf.h != term.height:
            buf = ScreenBuffer(term.width, term.height)
        buf.clear()

        snap = state.snapshot()
        input_r, messages_r = layout(Region(0, 0, term.width, term.height), config.margin, config.input_height)
        cursor = draw(buf, snap, input_r, messages_r, term)
        buf.flush(term)
        place_cursor(term, *cursor)

        event = events.next()
        loop_state = handle_event(state, event, config.quit_key)
        if loop_state is LoopState.RUNNING and log:
            log.info("%s", state.snapshot().buffer)


def _check_tty(term):
    if not sys.stdin.isatty() or not term.is_a_tty:
        raise InkboxError("inkbox needs an interactive terminal")


def main() -> int:
    log = None
    try:
        config = Config.from_env()
        log = open_log(config.log_path, config.log_level)
        term = Terminal()
        _check_tty(term)
        log.info("starting (tick %.3fs)", config.tick_interval)

        state = ApplicationState(commit_empty=config.commit_empty)
        with term.fullscreen(), term.raw():
            with EventMultiplexer(keyboard_reader(term), config.tick_interval,
                                  config.poll_interval, log=log) as events:
                run_loop(term, state, events, log, config)
        log.info("exiting, %d message(s) in history", len(state.snapshot().history))
    except (InkboxError, OSError) as e:
        # terminal modes are already restored by the context managers above
        if log:
            log.error("fatal: %s", e)
        print(f"inkbox: {e}", file=sys.stderr)
        return 1
    finally:
        if log:
            close_log(log)
    return 0
