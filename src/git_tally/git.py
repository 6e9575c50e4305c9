from __future__ import annotations

import datetime as dt
import logging
import subprocess
import threading
from pathlib import Path
from typing import Iterable, Iterator

from .models import Commit, FileDiff
from .paths import normalize_numstat_path, should_exclude_path

logger = logging.getLogger(__name__)

COMMIT_MARKER = "@@@"
MAX_STDERR_CHARS = 50_000


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def is_git_repo(path: Path) -> bool:
    code, out, _ = run_git(["rev-parse", "--is-inside-work-tree"], cwd=path)
    return code == 0 and out.strip() == "true"


def parse_commit_date(value: str) -> dt.datetime:
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return dt.datetime.fromisoformat(s)


def log_command(
    *,
    revs: Iterable[str] = (),
    since: str | None = None,
    until: str | None = None,
    include_merges: bool = False,
) -> list[str]:
    pretty = f"{COMMIT_MARKER}%H\t%an\t%ae\t%cI"
    cmd = ["git", "log", "--reverse", "--date-order", f"--pretty=format:{pretty}", "--numstat"]
    if not include_merges:
        cmd.append("--no-merges")
    if since:
        cmd.append(f"--since={since}")
    if until:
        cmd.append(f"--until={until}")
    cmd.extend(revs)
    cmd.append("--")
    return cmd


def iter_commits(
    repo: Path,
    *,
    revs: Iterable[str] = (),
    since: str | None = None,
    until: str | None = None,
    include_merges: bool = False,
    exclude_path_prefixes: Iterable[str] = (),
    exclude_path_globs: Iterable[str] = (),
) -> Iterator[Commit]:
    """
    Stream commits of `repo` oldest first, with per-file numstat diffs.

    Raises RuntimeError once the stream is exhausted if git exited non-zero.
    """
    cmd = log_command(revs=revs, since=since, until=until, include_merges=include_merges)
    prefixes = list(exclude_path_prefixes)
    globs = list(exclude_path_globs)
    logger.debug("running %s in %s", " ".join(cmd), repo)

    proc = subprocess.Popen(
        cmd,
        cwd=str(repo),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )

    stderr_chunks: list[str] = []
    stderr_chars = 0

    def drain_stderr() -> None:
        nonlocal stderr_chars
        if proc.stderr is None:
            return
        while True:
            chunk = proc.stderr.read(8192)
            if not chunk:
                return
            if stderr_chars >= MAX_STDERR_CHARS:
                continue
            take = chunk[: MAX_STDERR_CHARS - stderr_chars]
            stderr_chunks.append(take)
            stderr_chars += len(take)

    stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
    stderr_thread.start()

    header: list[str] | None = None
    diffs: list[FileDiff] = []

    def build() -> Commit:
        assert header is not None
        sha, name, email, date = (header + ["", "", "", ""])[:4]
        return Commit(
            hash=sha,
            author_name=name,
            author_email=email,
            date=parse_commit_date(date),
            file_diffs=tuple(diffs),
        )

    finished = False
    try:
        assert proc.stdout is not None
        for raw_line in proc.stdout:
            line = raw_line.rstrip("\n")
            if not line:
                continue
            if line.startswith(COMMIT_MARKER):
                if header is not None:
                    yield build()
                header = line[len(COMMIT_MARKER) :].split("\t", 3)
                diffs = []
                continue

            parts = line.split("\t", 2)
            if len(parts) < 3 or header is None:
                continue
            added_s, removed_s = parts[0], parts[1]
            path = normalize_numstat_path(parts[2])
            if should_exclude_path(path, prefixes, globs):
                continue
            if added_s == "-" or removed_s == "-":
                # binary file
                added = removed = 0
            else:
                try:
                    added = int(added_s)
                    removed = int(removed_s)
                except ValueError:
                    continue
            diffs.append(FileDiff(path=path, lines_added=added, lines_removed=removed))

        if header is not None:
            yield build()
        finished = True
    finally:
        if not finished and proc.poll() is None:
            # Consumer stopped early or parsing failed.
            proc.kill()
        if proc.stdout is not None:
            proc.stdout.close()
        code = proc.wait()
        stderr_thread.join()

    if code != 0:
        stderr = "".join(stderr_chunks)
        raise RuntimeError(f"git log exited {code}: {stderr.strip()[:500]}")
