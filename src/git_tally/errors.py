from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .timeseries import TimeSeries


class UnsupportedModeError(ValueError):
    pass


class CommitOrderError(ValueError):
    """Raised when a commit cannot be placed by a forward-only walk over the buckets."""


class BucketMismatchError(ValueError):
    pass


class CommitStreamError(RuntimeError):
    """
    The commit iterator raised mid-stream.

    `buckets` holds whatever was tallied before the failure; the original
    exception is chained as `__cause__`.
    """

    def __init__(self, message: str, buckets: "TimeSeries") -> None:
        super().__init__(message)
        self.buckets = buckets
