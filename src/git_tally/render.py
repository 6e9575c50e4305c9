from __future__ import annotations

from typing import Iterable

from .models import TallyMode
from .timeseries import TimeBucket

MODE_UNITS = {
    TallyMode.COMMITS: "commits",
    TallyMode.FILES: "files",
    TallyMode.LINES: "lines",
}


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: int, max_value: int, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def render_timeline(buckets: Iterable[TimeBucket], mode: TallyMode) -> str:
    """One line per bucket: label, top author, their value, bucket total, bar of the total."""
    mode.check()
    ranked = [b.rank(mode) for b in buckets]
    unit = MODE_UNITS[mode]

    lines: list[str] = []
    lines.append(f"{'Period':12} {'Top author':28} {unit:>10} {'total':>10}")
    lines.append("-" * 86)
    max_total = max((b.total_value(mode) for b in ranked), default=0)
    for b in ranked:
        total = b.total_value(mode)
        if total > 0:
            who = trunc(b.tally.name or b.tally.email or "unknown", 28)
            value = fmt_int(b.value(mode))
        else:
            who, value = "", ""
        lines.append(f"{trunc(b.name, 12):12} {who:28} {value:>10} {fmt_int(total):>10}  {bar(total, max_total)}")
    if not ranked:
        lines.append("(no commits found)")
    return "\n".join(lines) + "\n"
