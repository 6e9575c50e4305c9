from __future__ import annotations

import json
from pathlib import Path

import pytest

from git_tally.cli import main

from gitrepo import commit_file, init_repo


def _repo(path: Path, author: str, email: str, days: list[int]) -> Path:
    init_repo(path)
    for i, day in enumerate(days):
        commit_file(
            repo=path,
            filename=f"f{i}.txt",
            content="x\n" * (i + 1),
            date=f"2024-01-{day:02d}T10:00:00+00:00",
            author=author,
            email=email,
        )
    return path


def test_cli_prints_daily_timeline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = _repo(tmp_path / "r", "Alice", "alice@example.com", [5, 5, 7])

    code = main([str(repo), "--until", "2024-01-08", "--config", str(tmp_path / "config.json")])
    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Period")
    assert "commits" in lines[0]
    assert [ln.split()[0] for ln in lines[2:]] == ["2024-01-05", "2024-01-06", "2024-01-07"]
    assert "Alice" in lines[2]
    assert lines[2].split()[-2] == "2"


def test_cli_merges_repos_and_honors_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    a = _repo(tmp_path / "a", "Alice", "alice@example.com", [5])
    b = _repo(tmp_path / "b", "Bob", "bob@example.com", [5, 6])
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"mode": "lines", "key": "name"}), encoding="utf-8")

    code = main([str(a), str(b), "--until", "2024-01-07", "--config", str(cfg)])
    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert "lines" in lines[0]
    # Bob's second file has two lines on the 6th; on the 5th Alice and Bob tie on one line each.
    assert lines[2].split()[1] == "Alice"
    assert lines[2].split()[-2] == "2"
    assert lines[3].split()[1] == "Bob"


def test_cli_last_modified_mode_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = _repo(tmp_path / "r", "Alice", "alice@example.com", [5])
    code = main([str(repo), "--mode", "m", "--config", str(tmp_path / "config.json")])
    assert code == 2
    assert "not implemented" in capsys.readouterr().err


def test_cli_rejects_non_repo(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    d = tmp_path / "plain"
    d.mkdir()
    code = main([str(d), "--config", str(tmp_path / "config.json")])
    assert code == 2
    assert "not a git repository" in capsys.readouterr().err


def test_cli_rejects_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = _repo(tmp_path / "r", "Alice", "alice@example.com", [5])
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"key": "login"}), encoding="utf-8")
    code = main([str(repo), "--config", str(cfg)])
    assert code == 2
    assert "config `key`" in capsys.readouterr().err


def test_cli_rejects_negative_jobs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = _repo(tmp_path / "r", "Alice", "alice@example.com", [5])
    code = main([str(repo), "--jobs", "-1", "--until", "2024-01-08", "--config", str(tmp_path / "config.json")])
    assert code == 2
    assert "--jobs" in capsys.readouterr().err


def test_cli_reports_repos_on_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = _repo(tmp_path / "r", "Alice", "alice@example.com", [5])
    code = main([str(repo), "--until", "2024-01-08", "--config", str(tmp_path / "config.json")])
    assert code == 0
    captured = capsys.readouterr()
    assert "Tallying 1 repo(s):" in captured.err
    assert f"- {repo.resolve()}" in captured.err
    assert "Tallying" not in captured.out
