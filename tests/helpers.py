from __future__ import annotations

import datetime as dt

from git_tally.models import Commit, FileDiff


def at(year: int, month: int, day: int, hour: int = 12) -> dt.datetime:
    return dt.datetime(year, month, day, hour, tzinfo=dt.timezone.utc)


def make_commit(
    when: dt.datetime,
    *,
    name: str = "Alice",
    email: str = "alice@example.com",
    files: list[tuple[str, int, int]] | None = None,
    sha: str = "",
) -> Commit:
    diffs = tuple(FileDiff(path=p, lines_added=a, lines_removed=r) for p, a, r in (files or []))
    return Commit(
        hash=sha or f"{abs(hash((when, email, diffs))):040x}"[:40],
        author_name=name,
        author_email=email,
        date=when,
        file_diffs=diffs,
    )
