from __future__ import annotations

import pytest

from git_tally.errors import UnsupportedModeError
from git_tally.models import TallyMode
from git_tally.tally import FinalTally, Tally, rank, total

from helpers import at, make_commit


def _tally(*commits) -> Tally:
    t = Tally(name=commits[0].author_name, email=commits[0].author_email)
    for c in commits:
        t.add_commit(c)
    return t


def test_file_count_is_distinct_paths() -> None:
    t = _tally(
        make_commit(at(2024, 1, 1), files=[("src/a.py", 3, 1)]),
        make_commit(at(2024, 1, 2), files=[("src/a.py", 2, 0)]),
    )
    f = t.final()
    assert f.commits == 2
    assert f.file_count == 1
    assert f.lines_added == 5
    assert f.lines_removed == 1
    assert f.lines_changed == 6


def test_combine_sums_counts_and_unions_files() -> None:
    a = _tally(make_commit(at(2024, 1, 1), files=[("x", 1, 1), ("y", 0, 2)]))
    b = _tally(make_commit(at(2024, 1, 2), files=[("y", 4, 0), ("z", 1, 0)]))
    merged = a.combine(b)
    assert merged.commits == 2
    assert merged.added == 6
    assert merged.removed == 3
    assert merged.fileset == {"x", "y", "z"}
    # Inputs untouched.
    assert a.fileset == {"x", "y"}
    assert b.commits == 1


def test_final_tally_value_per_mode() -> None:
    f = FinalTally(commits=4, file_count=7, lines_added=10, lines_removed=5)
    assert f.value(TallyMode.COMMITS) == 4
    assert f.value(TallyMode.FILES) == 7
    assert f.value(TallyMode.LINES) == 15
    with pytest.raises(UnsupportedModeError):
        f.value(TallyMode.LAST_MODIFIED)


def test_rank_lines_mode_and_total() -> None:
    tallies = {
        "b@example.com": _tally(make_commit(at(2024, 1, 1), name="B", email="b@example.com", files=[("f", 2, 1)])),
        "a@example.com": _tally(make_commit(at(2024, 1, 1), name="A", email="a@example.com", files=[("f", 6, 4)])),
    }
    ranked = rank(tallies, TallyMode.LINES)
    assert [f.name for f in ranked] == ["A", "B"]

    tot = total(tallies)
    assert tot.lines_added + tot.lines_removed == 13
    assert tot.commits == 2
    assert tot.file_count == 1  # shared path is not double counted
    assert tot.name == ""


def test_rank_ties_broken_by_key_not_insertion_order() -> None:
    def tallies(order: list[str]) -> dict[str, Tally]:
        return {k: _tally(make_commit(at(2024, 1, 1), name=k.title(), email=f"{k}@example.com")) for k in order}

    r1 = rank(tallies(["zed", "amy", "kim"]), TallyMode.COMMITS)
    r2 = rank(tallies(["kim", "zed", "amy"]), TallyMode.COMMITS)
    assert [f.name for f in r1] == ["Amy", "Kim", "Zed"]
    assert r1 == r2


def test_rank_prefers_higher_score_over_key() -> None:
    c = make_commit(at(2024, 1, 1))
    tallies = {"aaa": _tally(c), "zzz": _tally(c, c)}
    tallies["zzz"].name = "Z"
    assert rank(tallies, TallyMode.COMMITS)[0].name == "Z"
