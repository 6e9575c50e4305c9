from __future__ import annotations

import dataclasses
import datetime as dt
import functools
import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator

from .errors import BucketMismatchError, CommitOrderError, CommitStreamError
from .models import Commit, TallyMode, TallyOpts
from .resolution import Resolution, calc_resolution
from .tally import FinalTally, Tally, rank, total

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class TimeBucket:
    name: str
    time: dt.datetime
    tally: FinalTally = dataclasses.field(default_factory=FinalTally)  # winning author
    total_tally: FinalTally = dataclasses.field(default_factory=FinalTally)  # all authors
    tallies: dict[str, Tally] = dataclasses.field(default_factory=dict, repr=False)

    def value(self, mode: TallyMode) -> int:
        return self.tally.value(mode)

    def total_value(self, mode: TallyMode) -> int:
        return self.total_tally.value(mode)

    def combine(self, other: TimeBucket) -> TimeBucket:
        if self.name != other.name:
            raise BucketMismatchError(f"cannot combine buckets whose names do not match: {self.name!r} != {other.name!r}")
        if self.time != other.time:
            raise BucketMismatchError(f"cannot combine buckets whose times do not match: {self.time} != {other.time}")

        merged = {key: t.copy() for key, t in self.tallies.items()}
        for key, t in other.tallies.items():
            existing = merged.get(key)
            merged[key] = existing.combine(t) if existing is not None else t.copy()
        return TimeBucket(name=self.name, time=self.time, tallies=merged)

    def rank(self, mode: TallyMode) -> TimeBucket:
        mode.check()
        if not self.tallies:
            return dataclasses.replace(self, tally=FinalTally(), total_tally=FinalTally())
        return dataclasses.replace(self, tally=rank(self.tallies, mode)[0], total_tally=total(self.tallies))


class TimeSeries(list):
    """Time-ascending, gap-free list of TimeBuckets at a single resolution."""

    def combine(self, other: Iterable[TimeBucket]) -> TimeSeries:
        buckets: dict[dt.datetime, TimeBucket] = {}
        for bucket in itertools.chain(self, other):
            existing = buckets.get(bucket.time)
            if existing is None:
                buckets[bucket.time] = bucket.combine(TimeBucket(name=bucket.name, time=bucket.time))
            else:
                buckets[bucket.time] = existing.combine(bucket)
        return TimeSeries(buckets[t] for t in sorted(buckets))

    def rank(self, mode: TallyMode) -> TimeSeries:
        return TimeSeries(b.rank(mode) for b in self)


def combine_series(series: Iterable[Iterable[TimeBucket]]) -> TimeSeries:
    return functools.reduce(lambda a, b: a.combine(b), series, TimeSeries())


def _pull(commits: Iterator[Commit], buckets: TimeSeries) -> Commit | None:
    try:
        return next(commits)
    except StopIteration:
        return None
    except Exception as e:
        raise CommitStreamError(f"error iterating commits: {e}", buckets) from e


def tally_commits_by_date(
    commits: Iterable[Commit],
    opts: TallyOpts,
    end: dt.datetime,
    *,
    resolution: Resolution | None = None,
) -> TimeSeries:
    """
    Returns a list of time buckets spanning the first commit through `end`.

    The resolution is derived from the distance between the first commit and
    `end` unless one is given. Commits must arrive in non-decreasing date
    order and fall before `end`.
    """
    opts.check()

    buckets = TimeSeries()
    it = iter(commits)

    first = _pull(it, buckets)
    if first is None:
        return buckets

    if resolution is None:
        resolution = calc_resolution(first.date, end)

    end_local = end.astimezone()
    t = resolution.apply(first.date)
    while end_local > t:
        buckets.append(TimeBucket(name=resolution.label(t), time=t))
        t = resolution.next(t)
    logger.debug("pre-built %d %s buckets", len(buckets), resolution.value)

    i = 0
    commit: Commit | None = first
    while commit is not None:
        bucket_time = resolution.apply(commit.date)
        if not buckets or bucket_time > buckets[-1].time:
            raise CommitOrderError(
                f"commit {commit.short_hash} at {commit.date.isoformat()} falls after the series end {end.isoformat()}"
            )
        if bucket_time < buckets[i].time:
            raise CommitOrderError(
                f"commit {commit.short_hash} at {commit.date.isoformat()} is out of order "
                f"(bucket {resolution.label(bucket_time)} precedes {buckets[i].name})"
            )
        # Forward only; empty buckets in between are skipped.
        while buckets[i].time != bucket_time:
            i += 1

        key = opts.key(commit)
        bucket = buckets[i]
        tally = bucket.tallies.get(key)
        if tally is None:
            tally = Tally(name=commit.author_name, email=commit.author_email)
            bucket.tallies[key] = tally
        tally.add_commit(commit)

        commit = _pull(it, buckets)

    return buckets


def tally_shards(
    shards: Iterable[Iterable[Commit]],
    opts: TallyOpts,
    end: dt.datetime,
    *,
    jobs: int | None = None,
) -> TimeSeries:
    """
    Tally several independently ordered commit streams and merge the results.

    Every shard is bucketed at the resolution picked for the earliest first
    commit across all shards, so the partial series line up on combine.
    """
    opts.check()

    heads: list[tuple[Commit, Iterator[Commit]]] = []
    try:
        for shard in shards:
            it = iter(shard)
            first = _pull(it, TimeSeries())
            if first is not None:
                heads.append((first, it))
    except Exception:
        # Stop the shards that already started (e.g. running `git log`).
        for _first, started in heads:
            close = getattr(started, "close", None)
            if close is not None:
                close()
        raise
    if not heads:
        return TimeSeries()

    earliest = min(first.date.astimezone() for first, _it in heads)
    resolution = calc_resolution(earliest, end)
    logger.debug("tallying %d shards at %s resolution", len(heads), resolution.value)

    with ThreadPoolExecutor(max_workers=jobs) as ex:
        futs = [
            ex.submit(tally_commits_by_date, itertools.chain([first], it), opts, end, resolution=resolution)
            for first, it in heads
        ]
        results = [fut.result() for fut in futs]

    return combine_series(results)
