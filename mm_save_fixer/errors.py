"""
Error types for the Motorsport Manager save fixer

Every failure raised while reading, editing or writing a save file is a
SaveFixerError. The concrete subclass tells the caller what went wrong and
the `kind` attribute carries the same information as an ErrorKind, so a
result object can report it without keeping the exception around.

None of these errors are recovered from internally: any failure aborts the
whole open or write operation.
"""

from enum import Enum


class ErrorKind(Enum):
    """Categories of failure"""
    INVALID_FORMAT = "invalid_format"
    UNSUPPORTED_VERSION = "unsupported_version"
    TOO_LARGE = "too_large"
    OUTPUT_TOO_LARGE = "output_too_large"
    CORRUPT_DATA = "corrupt_data"
    MALFORMED_TEXT = "malformed_text"
    MISSING_FIELD = "missing_field"
    INVALID_POSITION = "invalid_position"
    TEAM_SIZE_MISMATCH = "team_size_mismatch"
    FILE_EXISTS = "file_exists"
    FILE_NOT_FOUND = "file_not_found"
    IO_FAILURE = "io_failure"
    COMPRESSION_FAILURE = "compression_failure"
    INTERNAL = "internal"


class SaveFixerError(Exception):
    """Base class for all save fixer errors"""
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidFormatError(SaveFixerError):
    kind = ErrorKind.INVALID_FORMAT


class UnsupportedVersionError(SaveFixerError):
    kind = ErrorKind.UNSUPPORTED_VERSION


class TooLargeError(SaveFixerError):
    kind = ErrorKind.TOO_LARGE


class OutputTooLargeError(SaveFixerError):
    kind = ErrorKind.OUTPUT_TOO_LARGE


class CorruptDataError(SaveFixerError):
    kind = ErrorKind.CORRUPT_DATA


class MalformedTextError(SaveFixerError):
    """Raised by the text scanner for anything it cannot walk over"""
    kind = ErrorKind.MALFORMED_TEXT


class MissingFieldError(SaveFixerError):
    kind = ErrorKind.MISSING_FIELD


class InvalidPositionError(SaveFixerError):
    kind = ErrorKind.INVALID_POSITION


class TeamSizeMismatchError(SaveFixerError):
    kind = ErrorKind.TEAM_SIZE_MISMATCH


class SaveFileExistsError(SaveFixerError):
    kind = ErrorKind.FILE_EXISTS


class SaveFileNotFoundError(SaveFixerError):
    kind = ErrorKind.FILE_NOT_FOUND


class SaveIOError(SaveFixerError):
    kind = ErrorKind.IO_FAILURE


class CompressionFailureError(SaveFixerError):
    """Compression should never fail for valid input; this signals a bug"""
    kind = ErrorKind.COMPRESSION_FAILURE


class InternalError(SaveFixerError):
    """A broken invariant inside the fixer itself"""
    kind = ErrorKind.INTERNAL
