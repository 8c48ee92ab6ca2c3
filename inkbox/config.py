import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigError

os.environ.setdefault('ESCDELAY', '25')  # reduce escape key delay (ms)


@dataclass
class Config:
    tick_interval: float = 0.25  # seconds between Tick events
    poll_interval: float = 0.1   # how long one keyboard read blocks before re-checking for shutdown
    quit_key: str = "q"
    commit_empty: bool = True    # Enter on an empty buffer still adds an (empty) history entry
    log_path: str = "log/inkbox.log"
    log_level: str = "INFO"
    margin: int = 2
    input_height: int = 3

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> 'Config':
        cfg = cls()
        tick_ms = environ.get("INKBOX_TICK_MS")
        if tick_ms:
            try:
                cfg.tick_interval = int(tick_ms) / 1000
            except ValueError:
                raise ConfigError(f"INKBOX_TICK_MS must be an integer, got {tick_ms!r}") from None
            if cfg.tick_interval <= 0:
                raise ConfigError("INKBOX_TICK_MS must be positive")
        cfg.log_path = environ.get("INKBOX_LOG_FILE") or cfg.log_path
        cfg.log_level = (environ.get("INKBOX_LOG_LEVEL") or cfg.log_level).upper()
        quit_key = environ.get("INKBOX_QUIT_KEY")
        if quit_key is not None:
            if len(quit_key) != 1:
                raise ConfigError(f"INKBOX_QUIT_KEY must be a single character, got {quit_key!r}")
            cfg.quit_key = quit_key
        commit_empty = environ.get("INKBOX_COMMIT_EMPTY")
        if commit_empty is not None:
            cfg.commit_empty = commit_empty.strip().lower() not in ("0", "false", "no", "off")
        return cfg
