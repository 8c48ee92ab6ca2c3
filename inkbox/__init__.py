from .errors import ConfigError, InkboxError, InputSourceError
from .events import EventMultiplexer, InputEvent, KeyPress, Terminated, Tick
from .state import ApplicationState, Snapshot

__version__ = "0.1.0"
