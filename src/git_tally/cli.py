from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
from pathlib import Path

from .config import TallyConfig, load_config
from .errors import CommitOrderError, CommitStreamError, UnsupportedModeError
from .git import is_git_repo, iter_commits
from .identity import KEY_FUNCTIONS, key_function
from .models import TallyMode, TallyOpts
from .render import render_timeline
from .timeseries import tally_shards


def _parse_when(value: str) -> dt.datetime:
    s = (value or "").strip()
    try:
        if len(s) == 10:
            d = dt.date.fromisoformat(s)
            return dt.datetime(d.year, d.month, d.day).astimezone()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        return dt.datetime.fromisoformat(s).astimezone()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD or an ISO 8601 timestamp, got: {value!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-tally",
        description="Rank the top contributor of each day, month, or year of git history.",
    )
    parser.add_argument("repos", type=Path, nargs="*", help="Repositories to tally (default: current directory).")
    parser.add_argument(
        "--mode",
        "-m",
        type=str,
        default="",
        help="Metric to rank by: commits (c), files (f), lines (l). Overrides config `mode`.",
    )
    parser.add_argument("--key", choices=sorted(KEY_FUNCTIONS), default="", help="Group authors by email or by name.")
    parser.add_argument("--since", type=_parse_when, default=None, help="Only commits at or after this date.")
    parser.add_argument("--until", type=_parse_when, default=None, help="Only commits before this date (default: now).")
    parser.add_argument("--include-merges", action="store_true", help="Include merge commits.")
    parser.add_argument("--exclude-prefix", action="append", default=[], help="Ignore files under this path prefix (repeatable).")
    parser.add_argument("--exclude-glob", action="append", default=[], help="Ignore files matching this glob (repeatable).")
    parser.add_argument("--jobs", type=int, default=0, help="Parallel repos to tally (0 = one per repo).")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        cfg = TallyConfig.from_dict(load_config(args.config))
        mode = TallyMode.parse(args.mode) if args.mode else cfg.mode
        key = key_function(args.key or cfg.key)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.jobs < 0:
        print(f"error: --jobs must be 0 or a positive integer, got {args.jobs}", file=sys.stderr)
        return 2

    repos = [p.resolve() for p in (args.repos or [Path.cwd()])]
    for repo in repos:
        if not repo.is_dir() or not is_git_repo(repo):
            print(f"error: not a git repository: {repo}", file=sys.stderr)
            return 2

    print(f"Tallying {len(repos)} repo(s):", file=sys.stderr)
    for repo in repos:
        print(f"- {repo}", file=sys.stderr)

    end = args.until or dt.datetime.now().astimezone()
    until = (end - dt.timedelta(seconds=1)).isoformat()
    since = args.since.isoformat() if args.since else None

    shards = [
        iter_commits(
            repo,
            since=since,
            until=until,
            include_merges=args.include_merges or cfg.include_merges,
            exclude_path_prefixes=[*cfg.exclude_path_prefixes, *args.exclude_prefix],
            exclude_path_globs=[*cfg.exclude_path_globs, *args.exclude_glob],
        )
        for repo in repos
    ]
    jobs = args.jobs or cfg.jobs or len(shards)

    try:
        series = tally_shards(shards, TallyOpts(mode=mode, key=key), end, jobs=jobs)
    except UnsupportedModeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except CommitStreamError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except CommitOrderError as e:
        print(f"error: {e}", file=sys.stderr)
        print("Hint: commit dates are out of order (clock skew?); narrow the range with --since/--until.", file=sys.stderr)
        return 2

    print(render_timeline(series, mode), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
