from __future__ import annotations

import fnmatch
from typing import Iterable


def normalize_numstat_path(path: str) -> str:
    p = path.strip()
    # Renames show up as `src/{old => new}/file.py` or `old.py => new.py`; keep the destination.
    if " => " in p:
        if "{" in p and "}" in p:
            head, rest = p.split("{", 1)
            inner, tail = rest.split("}", 1)
            p = head + inner.split(" => ")[-1] + tail
            p = p.replace("//", "/")
        else:
            p = p.split(" => ")[-1]
    return p.strip()


def should_exclude_path(path: str, exclude_prefixes: Iterable[str], exclude_globs: Iterable[str]) -> bool:
    p = path.replace("\\", "/").removeprefix("./").lstrip("/")
    for pref in exclude_prefixes:
        pr = (pref or "").replace("\\", "/").removeprefix("./").lstrip("/")
        if not pr:
            continue
        if not pr.endswith("/"):
            pr = pr + "/"
        if p.startswith(pr) or f"/{pr}" in p:
            return True
    return any(pat and fnmatch.fnmatch(p, pat) for pat in exclude_globs)
