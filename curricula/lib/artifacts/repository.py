from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from curricula.domain.contracts import ArtifactRepository
from curricula.domain.errors import DocumentNotFoundError, DomainValidationError
from curricula.domain.lifecycle import stage_lifecycle
from curricula.domain.models import SOURCE_FORMATS
from curricula.lib.artifacts.layout import DirectoryLayout, ensure_directory


@dataclass(frozen=True)
class FilesystemArtifactRepository(ArtifactRepository):
    layout: DirectoryLayout
    encoding: str = "utf-8"

    def artifact_path(self, *, document_id: str, stage: str) -> Path:
        lifecycle = stage_lifecycle(stage)
        return self.layout.path(lifecycle.output_kind) / f"{document_id}{lifecycle.output_suffix}"

    def exists(self, *, document_id: str, stage: str) -> bool:
        return self.artifact_path(document_id=document_id, stage=stage).is_file()

    def save_text(self, *, document_id: str, stage: str, text: str) -> Path:
        path = self.artifact_path(document_id=document_id, stage=stage)
        ensure_directory(path.parent)
        path.write_text(text, encoding=self.encoding)
        return path

    def load_text(self, *, path: Path) -> str:
        return path.read_text(encoding=self.encoding, errors="replace")

    def list_sources(self, *, stage: str) -> list[Path]:
        lifecycle = stage_lifecycle(stage)
        source_dir = self.layout.path(lifecycle.source_kind)
        if not source_dir.is_dir():
            return []
        return sorted(
            (path for path in source_dir.iterdir() if path.is_file() and self._is_source(stage, path)),
            key=lambda path: path.name.lower(),
        )

    def resolve_source(self, *, stage: str, name: str | Path) -> Path:
        lifecycle = stage_lifecycle(stage)
        candidate = Path(name)
        if not candidate.is_absolute():
            candidate = self.layout.path(lifecycle.source_kind) / candidate
        if not candidate.is_file():
            raise DocumentNotFoundError(str(name))
        if not self._is_source(stage, candidate):
            raise DomainValidationError(f"{name} is not an input of the {stage} stage")
        return candidate

    def document_id_for(self, *, stage: str, path: Path) -> str:
        suffix = stage_lifecycle(stage).source_suffix
        if suffix is None:
            return path.stem
        return path.name.removesuffix(suffix)

    def _is_source(self, stage: str, path: Path) -> bool:
        suffix = stage_lifecycle(stage).source_suffix
        if suffix is None:
            return path.suffix.lower() in SOURCE_FORMATS
        return path.name.endswith(suffix)
