from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from curricula.domain.error_taxonomy import ErrorCode, RetryClassification
from curricula.domain.lifecycle import StageState, ensure_transition, stage_lifecycle


class DocumentFormat(StrEnum):
    PDF = "pdf"
    DOCX = "docx"
    OTHER = "other"


SOURCE_FORMATS: dict[str, DocumentFormat] = {
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.DOCX,
}


def detect_format(path: Path) -> DocumentFormat:
    return SOURCE_FORMATS.get(path.suffix.lower(), DocumentFormat.OTHER)


@dataclass
class Document:
    document_id: str
    source_path: Path
    format: DocumentFormat
    extracted: bool = False
    standardized: bool = False
    analyzed: bool = False

    @classmethod
    def from_source(cls, path: Path) -> Document:
        return cls(document_id=path.stem, source_path=path, format=detect_format(path))

    def mark_completed(self, stage: str) -> None:
        setattr(self, stage_lifecycle(stage).completion_flag, True)


@dataclass
class StageProgress:
    """Per-document state machine for one stage run."""

    document_id: str
    stage: str
    state: StageState = StageState.PENDING
    history: list[StageState] = field(default_factory=list)

    def transition(self, to_state: StageState) -> None:
        ensure_transition(from_state=self.state, to_state=to_state)
        self.history.append(self.state)
        self.state = to_state


@dataclass(frozen=True)
class DocumentOutcome:
    document_id: str
    stage: str
    state: StageState
    detail: str = ""
    artifact_path: Path | None = None
    error_code: ErrorCode | None = None
    retry_classification: RetryClassification | None = None


@dataclass(frozen=True)
class StageReport:
    stage: str
    outcomes: tuple[DocumentOutcome, ...]

    def _with_state(self, state: StageState) -> tuple[DocumentOutcome, ...]:
        return tuple(item for item in self.outcomes if item.state == state)

    @property
    def done(self) -> tuple[DocumentOutcome, ...]:
        return self._with_state(StageState.DONE)

    @property
    def skipped(self) -> tuple[DocumentOutcome, ...]:
        return self._with_state(StageState.SKIPPED)

    @property
    def failed(self) -> tuple[DocumentOutcome, ...]:
        return self._with_state(StageState.FAILED)

    @property
    def artifacts(self) -> tuple[Path, ...]:
        # Skipped documents count: their artifact exists from an earlier run.
        return tuple(
            item.artifact_path
            for item in self.outcomes
            if item.state in (StageState.DONE, StageState.SKIPPED) and item.artifact_path is not None
        )


@dataclass(frozen=True)
class AnalysisReport(StageReport):
    report_path: Path | None = None


@dataclass(frozen=True)
class RunReport:
    stages: tuple[StageReport, ...]
    failed_stage: str | None = None
    report_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.failed_stage is None
