"""Configuration file support.

A project may keep its source layout in ``beancount-staging.toml`` (or the
hidden ``.beancount-staging.toml``) next to the ledger::

    [journal]
    files = ["main.beancount"]

    [staging]
    files = ["import.beancount"]
    # or: command = ["bean-extract", "importers.py", "downloads/"]

Relative paths resolve against the directory holding the config file, and a
staging command runs in that directory. Unknown keys are rejected.
"""

from __future__ import annotations

import tomllib
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError
from .reconcile import ReconcileConfig
from .sources import StagingSource

CONFIG_FILENAMES: tuple[str, ...] = ("beancount-staging.toml", ".beancount-staging.toml")


class JournalSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    files: list[Path] = Field(min_length=1)


class StagingSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    files: list[Path] = Field(default_factory=list)
    command: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _files_xor_command(self) -> StagingSection:
        if self.files and self.command:
            raise ValueError("staging section cannot have both 'files' and 'command' specified")
        if not self.files and not self.command:
            raise ValueError("staging section must have either 'files' or 'command' specified")
        return self


class StagingConfig(BaseModel):
    """Validated contents of a config file."""

    model_config = ConfigDict(extra="forbid")

    journal: JournalSection
    staging: StagingSection

    def to_reconcile_config(self, base_dir: str | PathLike[str]) -> ReconcileConfig:
        base = Path(base_dir)
        journal = [base / p for p in self.journal.files]
        if self.staging.command:
            staging = StagingSource.from_command(self.staging.command, cwd=base)
        else:
            staging = StagingSource.from_files(base / p for p in self.staging.files)
        return ReconcileConfig(journal, staging)


def load_config(path: str | PathLike[str]) -> tuple[Path, StagingConfig]:
    """Load ``path``; return ``(base_dir, config)``."""

    path = Path(path)
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file: {path}: {e}") from e
    try:
        cfg = StagingConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file: {path}:\n{e}") from e
    return path.parent, cfg


def find_config(directory: str | PathLike[str] | None = None) -> Path | None:
    base = Path(directory) if directory is not None else Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def find_and_load(
    directory: str | PathLike[str] | None = None,
) -> tuple[Path, StagingConfig] | None:
    """Load the first config file found in ``directory`` (default: CWD)."""

    found = find_config(directory)
    if found is None:
        return None
    return load_config(found)


__all__ = [
    "CONFIG_FILENAMES",
    "JournalSection",
    "StagingSection",
    "StagingConfig",
    "ConfigError",
    "load_config",
    "find_config",
    "find_and_load",
]
