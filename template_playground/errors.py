"""Exceptions raised inside the playground core."""


class PlaygroundError(Exception):
    """Base class for playground errors."""


class EngineError(PlaygroundError):
    """The template engine reported a lexical, syntax or runtime failure.

    The message is the engine's own diagnostic and is shown verbatim.
    """


class ContextParseError(PlaygroundError):
    """The template context is not valid JSON."""


class StorageError(PlaygroundError):
    """A key/value storage backend could not be read or written."""
