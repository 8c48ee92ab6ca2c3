class InkboxError(Exception):
    """Base class for errors that stop inkbox."""


class ConfigError(InkboxError):
    pass


class InputSourceError(InkboxError):
    """The keyboard producer died; no more key presses will arrive."""
