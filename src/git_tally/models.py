from __future__ import annotations

import dataclasses
import datetime as dt
import enum
from typing import Callable

from .errors import UnsupportedModeError


@dataclasses.dataclass(frozen=True)
class FileDiff:
    path: str
    lines_added: int = 0
    lines_removed: int = 0


@dataclasses.dataclass(frozen=True)
class Commit:
    hash: str
    author_name: str
    author_email: str
    date: dt.datetime
    file_diffs: tuple[FileDiff, ...] = ()

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class TallyMode(enum.Enum):
    COMMITS = "commits"
    FILES = "files"
    LINES = "lines"
    LAST_MODIFIED = "last-modified"

    @classmethod
    def parse(cls, value: str) -> "TallyMode":
        s = (value or "").strip().lower()
        aliases = {"c": cls.COMMITS, "f": cls.FILES, "l": cls.LINES, "m": cls.LAST_MODIFIED}
        if s in aliases:
            return aliases[s]
        for mode in cls:
            if mode.value == s:
                return mode
        raise ValueError(f"Invalid tally mode: {value!r} (expected commits, files, lines, or last-modified)")

    def check(self) -> None:
        if self is TallyMode.LAST_MODIFIED:
            raise UnsupportedModeError("last modified mode not implemented")


@dataclasses.dataclass(frozen=True)
class TallyOpts:
    mode: TallyMode
    key: Callable[[Commit], str]

    def check(self) -> None:
        self.mode.check()
