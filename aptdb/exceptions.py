"""
Exception hierarchy for the aptdb library.

Every error raised by the library derives from AptDBError so callers can
catch the whole family in one place.
"""

from typing import Optional


class AptDBError(Exception):
    """Base class for all aptdb errors."""


class SourceFileError(AptDBError):
    """Raised when a source file is missing or cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RowParseError(AptDBError):
    """Raised when a source row has the wrong shape or an unparsable field."""

    def __init__(self, message: str, line: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.path = path

    def __str__(self) -> str:
        location = []
        if self.path:
            location.append(str(self.path))
        if self.line is not None:
            location.append(f"line {self.line}")
        if location:
            return f"{super().__str__()} ({', '.join(location)})"
        return super().__str__()


class EncodeError(AptDBError):
    """Raised when a record cannot be encoded."""


class DecodeError(AptDBError):
    """Raised when stored bytes cannot be decoded into a record."""


class NotFoundError(AptDBError):
    """Raised when a lookup misses."""


class TransactionError(AptDBError):
    """Raised on store-level failures (disk I/O, locking, misuse)."""


class BucketNotFoundError(TransactionError, NotFoundError):
    """Raised when deleting or opening a bucket that does not exist."""


class StoreClosedError(TransactionError):
    """Raised when a transaction is started on a closed store."""


class DownloadError(AptDBError):
    """Raised when a source file cannot be downloaded."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UnpopulatedError(AptDBError):
    """Raised when a database exists but has not been fully loaded."""
