"""Application configuration."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from erlindex.errors import ConfigError
from erlindex.utils.uri import path_from_uri, uri_from_path

CONFIG_FILENAME = "erlang_ls.config"


def _get_default_otp_path() -> Path | None:
    """Locate the OTP installation root from the ``erl`` executable on PATH."""
    erl = shutil.which("erl")
    if erl is None:
        return None
    # <root>/bin/erl, usually a symlink into <root>/lib/erlang/bin
    return Path(erl).resolve().parent.parent


@dataclass(slots=True)
class AppConfig:
    root_uri: str
    include_dirs: list[str] = field(default_factory=lambda: ["include"])
    deps_dirs: list[str] = field(default_factory=list)
    otp_path: Path | None = field(default_factory=_get_default_otp_path)
    db_path: Path | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.root_uri, str) or not self.root_uri.startswith("file://"):
            raise ConfigError(f"root_uri must be a file:// URI, got {self.root_uri!r}")
        for name in ("include_dirs", "deps_dirs"):
            value = getattr(self, name)
            if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
                raise ConfigError(f"{name} must be a list of strings")
            setattr(self, name, list(value))
        for name in ("otp_path", "db_path"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, (str, os.PathLike)):
                raise ConfigError(f"{name} must be a path, got {value!r}")
            setattr(self, name, Path(value))

    @property
    def root_path(self) -> Path:
        return path_from_uri(self.root_uri)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration options: {', '.join(unknown)}")
        if "root_uri" not in options:
            raise ConfigError("Missing required option: root_uri")
        return cls(**dict(options))

    @classmethod
    def for_root(cls, root: Path, **options: Any) -> "AppConfig":
        return cls.from_mapping({"root_uri": uri_from_path(Path(root).resolve()), **options})

    def resolve_db_path(self, base_dir: Path | None = None) -> Path | None:
        if self.db_path is None:
            return None
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path


def load_config(path: Path, *, root_uri: str | None = None) -> AppConfig:
    """Load an ``erlang_ls.config`` style YAML file.

    ``root_uri`` takes precedence over any value in the file.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        options = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(options, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    if root_uri is not None:
        options["root_uri"] = root_uri
    return AppConfig.from_mapping(options)
