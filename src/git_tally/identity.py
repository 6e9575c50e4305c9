from __future__ import annotations

from typing import Callable

from .models import Commit


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def key_by_email(commit: Commit) -> str:
    return normalize_email(commit.author_email)


def key_by_name(commit: Commit) -> str:
    return normalize_name(commit.author_name)


KEY_FUNCTIONS: dict[str, Callable[[Commit], str]] = {
    "email": key_by_email,
    "name": key_by_name,
}


def key_function(name: str) -> Callable[[Commit], str]:
    k = (name or "").strip().lower()
    try:
        return KEY_FUNCTIONS[k]
    except KeyError:
        raise ValueError(f"Invalid author key: {name!r} (expected one of: {', '.join(sorted(KEY_FUNCTIONS))})") from None
