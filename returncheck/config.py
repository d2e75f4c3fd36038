"""Checker flags from the command line, the environment and ``pyproject.toml``."""

from __future__ import annotations

import logging
import os
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


logger = logging.getLogger(__name__)

ENV_CUSTOM_ANNOTATIONS = "RETURNCHECK_CUSTOM_ANNOTATIONS"
ENV_EXCLUDE_ANNOTATIONS = "RETURNCHECK_EXCLUDE_ANNOTATIONS"
PROJECT_FILE = "pyproject.toml"
PROJECT_TABLE = "returncheck"
CUSTOM_ANNOTATIONS_KEY = "custom-annotations"
EXCLUDE_ANNOTATIONS_KEY = "exclude-annotations"

_SEPARATORS = re.compile(r"[,:]")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class CheckerFlags:
    custom_annotations: tuple[str, ...] | None = None
    exclude_annotations: tuple[str, ...] | None = None

    def merged_over(self, other: "CheckerFlags") -> "CheckerFlags":
        """Fill the options this instance leaves unset from ``other``."""
        return CheckerFlags(
            custom_annotations=(
                self.custom_annotations
                if self.custom_annotations is not None
                else other.custom_annotations
            ),
            exclude_annotations=(
                self.exclude_annotations
                if self.exclude_annotations is not None
                else other.exclude_annotations
            ),
        )


def parse_names(value: Any, source: str = "option") -> tuple[str, ...] | None:
    """Normalise a list option to a tuple of unique names.

    An explicit list, even an empty one, is always a value: ``custom-annotations = []``
    configures no must-check names at all. A string only comes from a flag or an
    environment variable, where a blank value means the option was not given.
    """
    if value is None:
        return None
    if isinstance(value, str):
        items = _SEPARATORS.split(value)
    elif isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigError(f"{source} entries must be strings, got {item!r}")
            items.append(item)
    else:
        raise ConfigError(f"{source} must be a string or a list of strings")

    names = tuple(dict.fromkeys(item.strip() for item in items if item.strip()))
    if not names and isinstance(value, str):
        return None
    return names


def flags_from_env(environ: Mapping[str, str] | None = None) -> CheckerFlags:
    environ = os.environ if environ is None else environ
    return CheckerFlags(
        custom_annotations=parse_names(
            environ.get(ENV_CUSTOM_ANNOTATIONS), ENV_CUSTOM_ANNOTATIONS
        ),
        exclude_annotations=parse_names(
            environ.get(ENV_EXCLUDE_ANNOTATIONS), ENV_EXCLUDE_ANNOTATIONS
        ),
    )


def flags_from_project(root: str | Path) -> CheckerFlags:
    project_file = Path(root) / PROJECT_FILE
    if not project_file.is_file():
        return CheckerFlags()
    try:
        data = tomllib.loads(project_file.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid {project_file}: {exc}") from exc

    table = data.get("tool", {}).get(PROJECT_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.{PROJECT_TABLE}] in {project_file} must be a table")
    return CheckerFlags(
        custom_annotations=parse_names(table.get(CUSTOM_ANNOTATIONS_KEY), CUSTOM_ANNOTATIONS_KEY),
        exclude_annotations=parse_names(
            table.get(EXCLUDE_ANNOTATIONS_KEY), EXCLUDE_ANNOTATIONS_KEY
        ),
    )


def resolve_flags(
    root: str | Path | None = None,
    custom_annotations: Any = None,
    exclude_annotations: Any = None,
    environ: Mapping[str, str] | None = None,
) -> CheckerFlags:
    """Command line beats environment, which beats the project file, option by option."""
    flags = CheckerFlags(
        custom_annotations=parse_names(custom_annotations, "--custom-annotations"),
        exclude_annotations=parse_names(exclude_annotations, "--exclude-annotations"),
    )
    flags = flags.merged_over(flags_from_env(environ))
    if root is not None:
        flags = flags.merged_over(flags_from_project(root))
    logger.debug(
        "Checker flags: custom=%s exclude=%s",
        flags.custom_annotations,
        flags.exclude_annotations,
    )
    return flags
