"""Exceptions raised by rtsprep.

Everything else uses the built-in exceptions: ValueError for bad arguments,
IndexError for out of range rows and OSError for filesystem failures.
"""


class FormatError(ValueError):
    """A file is missing a required header value, or its contents are inconsistent with its header."""


class ConversionError(RuntimeError):
    """A coordinate or time conversion reported a failure status."""

    def __init__(self, function: str, status, message: str = ''):
        self.function = function
        self.status = status
        super().__init__(f'Call to ERFA function {function} returned status {status}. {message}'.rstrip())
