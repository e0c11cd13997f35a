from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from curricula.domain.dto import LLMClientRequest, LLMClientResult
from curricula.lib.artifacts.types import AnalysisResult


@runtime_checkable
class DocumentDecoder(Protocol):
    """Turns one source document into text.

    May raise on corrupt input or resource exhaustion; callers wrap the
    failure into ExtractionFailed.
    """

    def decode(self, path: Path) -> str: ...


@runtime_checkable
class OCREngine(Protocol):
    """Image-to-text fallback. Must never raise past its boundary."""

    def available(self) -> bool: ...

    def recognize(self, path: Path, *, language_hint: str) -> str: ...


@runtime_checkable
class LLMClient(Protocol):
    """Black-box generative capability: prompt in, text out.

    Transport, auth and quota failures surface as GenerativeCallFailure.
    """

    def invoke(self, request: LLMClientRequest) -> LLMClientResult: ...


@runtime_checkable
class ArtifactRepository(Protocol):
    """Typed artifact I/O boundary over the stage directories."""

    def artifact_path(self, *, document_id: str, stage: str) -> Path: ...

    def exists(self, *, document_id: str, stage: str) -> bool: ...

    def save_text(self, *, document_id: str, stage: str, text: str) -> Path: ...

    def load_text(self, *, path: Path) -> str: ...

    def list_sources(self, *, stage: str) -> list[Path]: ...

    def resolve_source(self, *, stage: str, name: str | Path) -> Path: ...

    def document_id_for(self, *, stage: str, path: Path) -> str: ...


@runtime_checkable
class ResultSink(Protocol):
    def append(self, document_id: str, result: AnalysisResult) -> Path: ...

    def generate_csv_report(self) -> Path: ...
