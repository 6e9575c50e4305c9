from __future__ import annotations

import datetime as dt
import enum
import logging

logger = logging.getLogger(__name__)

MONTH_ABBRS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DAY = dt.timedelta(days=1)
YEAR = DAY * 365


def _local(t: dt.datetime) -> dt.datetime:
    # Naive values are taken as local wall time.
    return t.astimezone()


def _local_midnight(year: int, month: int, day: int) -> dt.datetime:
    return dt.datetime(year, month, day).astimezone()


class Resolution(enum.Enum):
    """
    Bucket granularity for a time series.

    apply - truncate a time to the start of its bucket
    next  - start of the bucket after the one containing the time
    label - human-readable name of the bucket containing the time

    All three work in the local timezone.
    """

    YEARLY = "yearly"
    MONTHLY = "monthly"
    DAILY = "daily"

    def apply(self, t: dt.datetime) -> dt.datetime:
        lt = _local(t)
        if self is Resolution.YEARLY:
            return _local_midnight(lt.year, 1, 1)
        if self is Resolution.MONTHLY:
            return _local_midnight(lt.year, lt.month, 1)
        return _local_midnight(lt.year, lt.month, lt.day)

    def next(self, t: dt.datetime) -> dt.datetime:
        start = self.apply(t)
        if self is Resolution.YEARLY:
            return _local_midnight(start.year + 1, 1, 1)
        if self is Resolution.MONTHLY:
            if start.month == 12:
                return _local_midnight(start.year + 1, 1, 1)
            return _local_midnight(start.year, start.month + 1, 1)
        d = start.date() + DAY
        return _local_midnight(d.year, d.month, d.day)

    def label(self, t: dt.datetime) -> str:
        start = self.apply(t)
        if self is Resolution.YEARLY:
            return f"{start.year:04d}"
        if self is Resolution.MONTHLY:
            return f"{MONTH_ABBRS[start.month - 1]} {start.year:04d}"
        return start.date().isoformat()


def calc_resolution(start: dt.datetime, end: dt.datetime) -> Resolution:
    duration = _local(end) - _local(start)
    if duration > YEAR * 5:
        res = Resolution.YEARLY
    elif duration > DAY * 60:
        res = Resolution.MONTHLY
    else:
        res = Resolution.DAILY
    logger.debug("span %s -> %s resolution", duration, res.value)
    return res
