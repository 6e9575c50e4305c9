from __future__ import annotations

import dataclasses

from .models import Commit, TallyMode


@dataclasses.dataclass(frozen=True)
class FinalTally:
    name: str = ""
    email: str = ""
    commits: int = 0
    file_count: int = 0
    lines_added: int = 0
    lines_removed: int = 0

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_removed

    def value(self, mode: TallyMode) -> int:
        mode.check()
        if mode is TallyMode.COMMITS:
            return self.commits
        if mode is TallyMode.FILES:
            return self.file_count
        return self.lines_changed


@dataclasses.dataclass
class Tally:
    """Running per-author totals inside one time bucket."""

    name: str = ""
    email: str = ""
    commits: int = 0
    added: int = 0
    removed: int = 0
    fileset: set[str] = dataclasses.field(default_factory=set)

    def add_commit(self, commit: Commit) -> None:
        self.commits += 1
        for diff in commit.file_diffs:
            self.added += diff.lines_added
            self.removed += diff.lines_removed
            self.fileset.add(diff.path)

    def combine(self, other: Tally) -> Tally:
        return Tally(
            name=self.name or other.name,
            email=self.email or other.email,
            commits=self.commits + other.commits,
            added=self.added + other.added,
            removed=self.removed + other.removed,
            fileset=self.fileset | other.fileset,
        )

    def copy(self) -> Tally:
        return dataclasses.replace(self, fileset=set(self.fileset))

    def final(self) -> FinalTally:
        return FinalTally(
            name=self.name,
            email=self.email,
            commits=self.commits,
            file_count=len(self.fileset),
            lines_added=self.added,
            lines_removed=self.removed,
        )


def rank(tallies: dict[str, Tally], mode: TallyMode) -> list[FinalTally]:
    """
    Order final tallies best-first by the metric for `mode`.

    Ties are broken by author key so the result does not depend on dict order.
    """
    mode.check()
    finals = [(key, t.final()) for key, t in tallies.items()]
    finals.sort(key=lambda kv: (-kv[1].value(mode), kv[0]))
    return [f for _key, f in finals]


def total(tallies: dict[str, Tally]) -> FinalTally:
    running = Tally()
    for t in tallies.values():
        running = running.combine(t)
    return dataclasses.replace(running.final(), name="", email="")
