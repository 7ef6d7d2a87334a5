"""Resolution of root-path templates into concrete source directories.

A template is a sequence of path segments, at most one of which is the ``*``
wildcard. Every directory a template resolves to is returned together with all
of its nested subdirectories, so deeply nested source trees are covered.
Nothing is cached: each call reflects the filesystem at that moment.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Dict, List, Sequence

from erlindex.config import AppConfig
from erlindex.utils.files import subdirs

WILDCARD = "*"

PathSpec = Sequence[str | Path]


def resolve_path(segments: PathSpec) -> List[Path]:
    """Expand one template into directories, including all subdirectories."""
    parts = Path(*(str(segment) for segment in segments)).parts
    if parts.count(WILDCARD) > 1:
        raise ValueError(f"At most one wildcard segment allowed: {parts}")

    pattern = os.path.join(*(part if part == WILDCARD else glob.escape(part) for part in parts))
    resolved: List[Path] = []
    for match in glob.glob(pattern):
        directory = Path(match)
        if not directory.is_dir():
            continue
        resolved.append(directory)
        resolved.extend(subdirs(directory))
    return resolved


def resolve_paths(specs: Sequence[PathSpec]) -> List[Path]:
    """Resolve several templates, concatenating results in template order."""
    resolved: List[Path] = []
    for spec in specs:
        resolved.extend(resolve_path(spec))
    return resolved


class RootPaths:
    """Root-path sets for the app, include, deps and runtime categories."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def app(self) -> List[Path]:
        root = self.config.root_path
        return resolve_paths([[root, "src"], [root, "test"], [root, "include"]])

    def include(self) -> List[Path]:
        root = self.config.root_path
        return resolve_paths([[root, directory] for directory in self.config.include_dirs])

    def deps(self) -> List[Path]:
        root = self.config.root_path
        specs = []
        for directory in self.config.deps_dirs:
            specs.extend(
                [
                    [root, directory, "src"],
                    [root, directory, "test"],
                    [root, directory, "include"],
                ]
            )
        return resolve_paths(specs)

    def runtime(self) -> List[Path]:
        otp = self.config.otp_path
        if otp is None:
            return []
        return resolve_paths([[otp, "lib", WILDCARD, "src"], [otp, "lib", WILDCARD, "include"]])

    def search_path(self) -> List[Path]:
        """Directories searched for on-demand indexing, highest priority first."""
        return self.app() + self.deps() + self.runtime()

    def by_category(self) -> Dict[str, List[Path]]:
        return {
            "app": self.app(),
            "include": self.include(),
            "deps": self.deps(),
            "runtime": self.runtime(),
        }
