"""Exception classes for trackplayer."""


class AudioError(Exception):
    """Base exception for playback engine errors."""
    pass


class EngineNotStartedError(AudioError):
    """Raised when a track is loaded before start()."""
    pass


class UnsupportedFormatError(AudioError):
    """Raised when a file extension or its content cannot be decoded."""
    pass


class ResourceUnavailableError(AudioError):
    """Raised when the backend cannot allocate an output line."""

    def __init__(self, message: str, detail: str = ""):
        self.message = message
        self.detail = detail
        if detail:
            super().__init__(f"Output line unavailable ({detail}): {message}")
        else:
            super().__init__(f"Output line unavailable: {message}")


class IoFailureError(AudioError):
    """Raised when an audio file cannot be read."""
    pass


class AlreadyClosedWarning(AudioError):
    """Raised by a resource that did not close cleanly. Logged, never fatal."""
    pass


# Short aliases
UnsupportedFormat = UnsupportedFormatError
ResourceUnavailable = ResourceUnavailableError
IoFailure = IoFailureError
EngineNotStarted = EngineNotStartedError
