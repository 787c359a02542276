"""Configuration loading (``locus.toml`` or ``[tool.locus]`` in pyproject)."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .translation import DEFAULT_LOCALE
from .visitor import DEFAULT_MARKERS
from .walker import WalkOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "locus.toml"


class LocusConfig(BaseModel):
    """Project settings; CLI flags override these when given."""

    model_config = ConfigDict(extra="forbid")

    extensions: list[str] = Field(default_factory=lambda: [".py"])
    markers: list[str] = Field(default_factory=lambda: list(DEFAULT_MARKERS))
    ignore_parse_errors: bool = False
    exclude_dirs: list[str] = Field(default_factory=list)
    workers: int = Field(default=1, ge=1)
    output: str | None = None
    locale: str = DEFAULT_LOCALE
    project: str = "PACKAGE VERSION"

    def walk_options(self) -> WalkOptions:
        return WalkOptions(
            extensions=tuple(self.extensions),
            markers=tuple(self.markers),
            ignore_parse_errors=self.ignore_parse_errors,
            skip_dirs=frozenset(self.exclude_dirs),
            workers=self.workers,
        )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def _find_settings(root: Path) -> tuple[Path | None, dict[str, Any]]:
    locus_toml = root / CONFIG_FILENAME
    if locus_toml.is_file():
        return locus_toml, _read_toml(locus_toml)

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        data = _read_toml(pyproject)
        section = data.get("tool", {}).get("locus")
        if section is not None:
            if not isinstance(section, dict):
                raise ConfigError(f"{pyproject}: [tool.locus] must be a table")
            return pyproject, section

    return None, {}


def load_config(root: Path) -> LocusConfig:
    """Load settings for the project at *root*, falling back to defaults."""
    source, data = _find_settings(root)
    try:
        cfg = LocusConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}:\n{exc}") from exc
    if source is not None:
        logger.debug("Loaded configuration from %s", source)
    return cfg
