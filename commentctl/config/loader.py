"""Load CommentCtlConfig from commentctl.yaml and COMMENTCTL_* variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from commentctl.config.models import CommentCtlConfig

CONFIG_ENV = "COMMENTCTL_CONFIG"
DEFAULT_CONFIG_FILE = "commentctl.yaml"
ENV_PREFIX = "COMMENTCTL_"


class ConfigLoadError(ValueError):
    """The config file exists but is not a YAML mapping of sections."""


def config_path(cli_path: str | None = None) -> Path:
    """COMMENTCTL_CONFIG, then --config, then ./commentctl.yaml."""
    for candidate in (os.environ.get(CONFIG_ENV, ""), cli_path or ""):
        if candidate.strip():
            return Path(candidate.strip())
    return Path.cwd() / DEFAULT_CONFIG_FILE


def read_config_file(path: Path) -> dict[str, Any]:
    """Sections of a config file; a missing or blank file has none."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    try:
        sections = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f"{path}:{mark.line + 1}:{mark.column + 1}" if mark is not None else str(path)
        raise ConfigLoadError(f"Invalid YAML at {where}") from exc
    if sections is None:
        return {}
    if not isinstance(sections, dict):
        raise ConfigLoadError(f"{path}: top level must be a mapping of sections")
    return sections


def _env_sections() -> dict[str, dict[str, str]]:
    """COMMENTCTL_<SECTION>__<KEY>=value pairs grouped by section."""
    sections: dict[str, dict[str, str]] = {}
    for name, value in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, sep, key = name[len(ENV_PREFIX) :].lower().partition("__")
        if sep and section and key:
            sections.setdefault(section, {})[key] = value.strip()
    return sections


def load_config(cli_path: str | None = None) -> CommentCtlConfig:
    """Defaults, overlaid by the config file, overlaid by the environment.

    Raises:
        ConfigLoadError: unreadable YAML or a non-mapping file.
        pydantic.ValidationError: values of the wrong type or out of range.
    """
    merged = read_config_file(config_path(cli_path))
    for section, values in _env_sections().items():
        current = merged.get(section)
        merged[section] = {**current, **values} if isinstance(current, dict) else values
    return CommentCtlConfig(**merged)
