from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from curricula.domain.lifecycle import STAGE_ORDER

DEFAULT_DIRECTORIES: dict[str, str] = {
    "input": "input",
    "extracted": "extracted",
    "processed": "processed",
    "analysis": "analysis",
    "report": "report",
    "log": "log",
    "temp": "temp",
}


@dataclass(frozen=True)
class DirectoryLayout:
    """Persisted pipeline state, stable across runs."""

    base_path: Path
    directories: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_DIRECTORIES))

    def path(self, kind: str) -> Path:
        return self.base_path / self.directories.get(kind, kind)

    def ensure_directories_exist(self) -> None:
        for kind in DEFAULT_DIRECTORIES:
            ensure_directory(self.path(kind))
        for stage in STAGE_ORDER:
            ensure_directory(self.path("log") / stage)


def ensure_directory(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def build_directory_layout(
    *,
    base_path: str | Path,
    overrides: Mapping[str, str] | None = None,
) -> DirectoryLayout:
    directories = dict(DEFAULT_DIRECTORIES)
    if overrides:
        for kind, name in overrides.items():
            if not isinstance(name, str) or not name:
                raise ValueError(f"directory name for '{kind}' must be non-empty string")
            directories[kind] = name
    return DirectoryLayout(base_path=Path(base_path), directories=directories)
