"""Exception hierarchy for twopass."""


class TwoPassError(Exception):
    """Base class for all twopass errors."""


class UsageError(TwoPassError):
    """Invalid command-line argument or unsupported engine option."""


class ProbeError(TwoPassError):
    """ffprobe failed or returned unusable media information."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(message)
        self.file_path = file_path


class TranscodeError(TwoPassError):
    """The transcoding engine could not be run to completion."""
