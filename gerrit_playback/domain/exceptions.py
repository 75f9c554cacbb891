"""Exceptions for the missed-events playback subsystem.

None of these is fatal to the host process. They describe why a recovery
cycle recovered fewer events than it could have, or why a checkpoint could
not be read or written.
"""


class PlaybackError(Exception):
    """Base class for all playback errors."""

    pass


class PersistenceError(PlaybackError):
    """Raised when checkpoint data cannot be loaded or saved.

    Callers degrade to an empty (on load) or unsaved (on save) checkpoint and
    keep the connection alive.
    """

    pass


class FetchError(PlaybackError):
    """Raised when the catch-up query against the upstream server fails.

    Aborts the current recovery cycle only. The next reconnect retries from
    the last checkpoint.
    """

    pass


class ParseError(PlaybackError):
    """Raised when a single raw event record cannot be parsed.

    The record is skipped and the rest of the batch is processed.
    """

    pass
