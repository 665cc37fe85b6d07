"""normfix.toml loading and resolved settings."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

CONFIG_NAME = "normfix.toml"


@dataclass(frozen=True, slots=True)
class Settings:
    """Tool locations and limits for one run."""

    checker_command: str = "norminette"
    checker_timeout: float = 30.0
    formatter_command: str = "clang-format"
    formatter_timeout: float = 10.0
    column_limit: int = 1024
    use_formatter: bool = True
    jobs: int = 1


def config_dir_for(target: Path) -> Path:
    """Directory searched for normfix.toml: the target itself or its parent."""
    directory = target if target.is_dir() else target.parent
    if not directory.parts:
        directory = Path(".")
    return directory


def load_config(config_path: Path | None, search_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else search_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def settings_from_config(config: dict[str, Any], base: Settings | None = None) -> Settings:
    """Overlay recognised config keys onto *base*; unknown or mistyped keys are ignored."""
    settings = base if base is not None else Settings()

    checker = config.get("checker")
    if isinstance(checker, dict):
        command = checker.get("command")
        if isinstance(command, str) and command:
            settings = replace(settings, checker_command=command)
        timeout = checker.get("timeout")
        if isinstance(timeout, (int, float)) and timeout > 0:
            settings = replace(settings, checker_timeout=float(timeout))

    formatter = config.get("formatter")
    if isinstance(formatter, dict):
        command = formatter.get("command")
        if isinstance(command, str) and command:
            settings = replace(settings, formatter_command=command)
        timeout = formatter.get("timeout")
        if isinstance(timeout, (int, float)) and timeout > 0:
            settings = replace(settings, formatter_timeout=float(timeout))
        limit = formatter.get("column_limit")
        if isinstance(limit, int) and limit > 0:
            settings = replace(settings, column_limit=limit)
        enabled = formatter.get("enabled")
        if isinstance(enabled, bool):
            settings = replace(settings, use_formatter=enabled)

    fix = config.get("fix")
    if isinstance(fix, dict):
        jobs = fix.get("jobs")
        if isinstance(jobs, int) and jobs > 0:
            settings = replace(settings, jobs=jobs)

    return settings
