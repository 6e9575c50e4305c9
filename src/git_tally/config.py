from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from .identity import KEY_FUNCTIONS
from .models import TallyMode


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a JSON object at top level")
    return data


def _str_list(cfg: dict, name: str) -> tuple[str, ...]:
    value = cfg.get(name, [])
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"config `{name}` must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


@dataclasses.dataclass(frozen=True)
class TallyConfig:
    mode: TallyMode = TallyMode.COMMITS
    key: str = "email"
    include_merges: bool = False
    exclude_path_prefixes: tuple[str, ...] = ()
    exclude_path_globs: tuple[str, ...] = ()
    jobs: int | None = None

    @classmethod
    def from_dict(cls, cfg: dict) -> TallyConfig:
        mode = TallyMode.parse(str(cfg.get("mode", TallyMode.COMMITS.value)))
        key = str(cfg.get("key", "email")).strip().lower()
        if key not in KEY_FUNCTIONS:
            raise ValueError(f"config `key` must be one of: {', '.join(sorted(KEY_FUNCTIONS))}")
        include_merges = cfg.get("include_merges", False)
        if not isinstance(include_merges, bool):
            raise ValueError("config `include_merges` must be true or false")
        jobs = cfg.get("jobs")
        if jobs is not None and (not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1):
            raise ValueError("config `jobs` must be a positive integer")
        return cls(
            mode=mode,
            key=key,
            include_merges=include_merges,
            exclude_path_prefixes=_str_list(cfg, "exclude_path_prefixes"),
            exclude_path_globs=_str_list(cfg, "exclude_path_globs"),
            jobs=jobs,
        )
