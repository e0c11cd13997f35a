from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from curricula.domain.contracts import ArtifactRepository, ResultSink
from curricula.domain.error_taxonomy import classify_error, resolve_stage_error
from curricula.domain.errors import ExtractionFailed, GenerativeCallFailure
from curricula.domain.lifecycle import StageState
from curricula.domain.models import (
    AnalysisReport,
    Document,
    DocumentOutcome,
    RunReport,
    StageProgress,
    StageReport,
    detect_format,
)
from curricula.domain.use_cases.analyze import AnalysisStage
from curricula.domain.use_cases.extract import ExtractionStage
from curricula.domain.use_cases.standardize import StandardizationStage
from curricula.lib.artifacts.types import DegradedAnalysis

COMPONENT_ID = "pipeline.orchestrator"

OCR_AVAILABLE_STATUS = "OCR available as fallback for problematic PDFs"
OCR_UNAVAILABLE_STATUS = "OCR not available. Problematic files may fail extraction"

StageStep = Callable[[Document, Path], DocumentOutcome]
logger = logging.getLogger("curricula.pipeline")


@dataclass
class PipelineOrchestrator:
    """Runs extract -> process -> analyze over the stage directories.

    Holds the only per-document control state. A failing document is logged
    and recorded as FAILED; the batch always moves on to the next one.
    """

    extraction: ExtractionStage
    standardization: StandardizationStage
    analysis: AnalysisStage
    artifacts: ArtifactRepository
    sink: ResultSink
    documents: dict[str, Document] = field(default_factory=dict)

    def ocr_status(self) -> str:
        return OCR_AVAILABLE_STATUS if self.extraction.ocr_available else OCR_UNAVAILABLE_STATUS

    def extract(self, *, force: bool = False) -> StageReport:
        logger.info(self.ocr_status(), extra={"stage": "extract"})
        sources = self.artifacts.list_sources(stage="extract")
        return self._run_stage("extract", sources, force=force, step=self._extract_one)

    def process(self, files: Sequence[str | Path] | None = None, *, force: bool = False) -> StageReport:
        sources = self._resolve_sources("process", files)
        return self._run_stage("process", sources, force=force, step=self._standardize_one)

    def analyze(self, files: Sequence[str | Path] | None = None, *, force: bool = False) -> AnalysisReport:
        sources = self._resolve_sources("analyze", files)
        report = self._run_stage("analyze", sources, force=force, step=self._analyze_one)
        report_path = self.sink.generate_csv_report() if report.artifacts else None
        return AnalysisReport(stage=report.stage, outcomes=report.outcomes, report_path=report_path)

    def run_all(self, *, force: bool = False) -> RunReport:
        reports: list[StageReport] = []

        extracted = self.extract(force=force)
        reports.append(extracted)
        if not extracted.artifacts:
            return self._stage_produced_nothing(reports, "extract")

        processed = self.process(force=force)
        reports.append(processed)
        if not processed.artifacts:
            return self._stage_produced_nothing(reports, "process")

        analyzed = self.analyze(force=force)
        reports.append(analyzed)
        if analyzed.report_path is None:
            return self._stage_produced_nothing(reports, "analyze")

        return RunReport(stages=tuple(reports), report_path=analyzed.report_path)

    def _resolve_sources(self, stage: str, files: Sequence[str | Path] | None) -> list[Path]:
        if files is None:
            return self.artifacts.list_sources(stage=stage)
        # Validate every requested file before dispatching any of them.
        return [self.artifacts.resolve_source(stage=stage, name=item) for item in files]

    def _run_stage(self, stage: str, sources: list[Path], *, force: bool, step: StageStep) -> StageReport:
        logger.info(
            "stage started",
            extra={"stage": stage, "documents_total": len(sources), "force": force},
        )
        outcomes = tuple(self._run_document(stage, source, force=force, step=step) for source in sources)
        report = StageReport(stage=stage, outcomes=outcomes)
        logger.info(
            "stage finished",
            extra={
                "stage": stage,
                "done": len(report.done),
                "skipped": len(report.skipped),
                "failed": len(report.failed),
            },
        )
        return report

    def _run_document(self, stage: str, source: Path, *, force: bool, step: StageStep) -> DocumentOutcome:
        document = self._document_for(stage, source)
        progress = StageProgress(document_id=document.document_id, stage=stage)

        if not force and self.artifacts.exists(document_id=document.document_id, stage=stage):
            progress.transition(StageState.SKIPPED)
            document.mark_completed(stage)
            outcome = DocumentOutcome(
                document_id=document.document_id,
                stage=stage,
                state=StageState.SKIPPED,
                detail="output artifact already exists",
                artifact_path=self.artifacts.artifact_path(document_id=document.document_id, stage=stage),
            )
            self._log_outcome(outcome, source)
            return outcome

        progress.transition(StageState.IN_PROGRESS)
        logger.info("document started", extra={"stage": stage, "document_id": document.document_id})
        try:
            outcome = step(document, source)
        except Exception as exc:
            logger.exception(
                "unexpected failure",
                extra={"stage": stage, "document_id": document.document_id},
            )
            outcome = self._failure(document, stage, code="internal_error", detail=str(exc) or repr(exc))

        progress.transition(outcome.state)
        if outcome.state == StageState.DONE:
            document.mark_completed(stage)
        self._log_outcome(outcome, source)
        return outcome

    def _extract_one(self, document: Document, source: Path) -> DocumentOutcome:
        log_extra = {"stage": "extract", "document": source.name}
        failure_code = "empty_output"
        failure_detail = "Extracted text is empty, even after OCR attempt"
        try:
            text = self.extraction.extract(document)
        except ExtractionFailed as exc:
            logger.warning("Error in normal extraction, trying OCR: %s", exc.reason, extra=log_extra)
            text = ""
            failure_code = "decode_failure"
            failure_detail = f"{exc.reason}; OCR recovery failed"
        else:
            if not text.strip():
                logger.info("Empty text, using OCR as fallback", extra=log_extra)

        detail = "extracted with native decoder"
        if not text.strip():
            text = self.extraction.extract_with_ocr(document)
            if not text.strip():
                return self._failure(document, "extract", code=failure_code, detail=failure_detail)
            detail = "extracted with OCR"
            logger.info("OCR extraction successful", extra=log_extra)

        path = self.artifacts.save_text(document_id=document.document_id, stage="extract", text=text)
        return DocumentOutcome(
            document_id=document.document_id,
            stage="extract",
            state=StageState.DONE,
            detail=detail,
            artifact_path=path,
        )

    def _standardize_one(self, document: Document, source: Path) -> DocumentOutcome:
        text = self.artifacts.load_text(path=source)
        if not text.strip():
            return self._failure(document, "process", code="empty_output", detail="Text file is empty")
        try:
            standardized = self.standardization.standardize(text)
        except GenerativeCallFailure as exc:
            return self._failure(document, "process", code="generative_call_failure", detail=str(exc))
        if not standardized.strip():
            return self._failure(
                document, "process", code="empty_output", detail="Standardization returned empty text"
            )

        path = self.artifacts.save_text(document_id=document.document_id, stage="process", text=standardized)
        return DocumentOutcome(
            document_id=document.document_id,
            stage="process",
            state=StageState.DONE,
            detail="standardization completed",
            artifact_path=path,
        )

    def _analyze_one(self, document: Document, source: Path) -> DocumentOutcome:
        text = self.artifacts.load_text(path=source)
        if not text.strip():
            return self._failure(document, "analyze", code="empty_output", detail="Standardized file is empty")
        try:
            result = self.analysis.analyze(text)
        except GenerativeCallFailure as exc:
            return self._failure(document, "analyze", code="generative_call_failure", detail=str(exc))
        if not result.report.strip():
            return self._failure(document, "analyze", code="empty_output", detail="Analysis returned invalid data")

        path = self.artifacts.save_text(document_id=document.document_id, stage="analyze", text=result.report)
        try:
            self.sink.append(document.document_id, result)
        except Exception:
            # The artifact is the skip marker; it must not outlive a missing report row.
            path.unlink(missing_ok=True)
            raise

        detail = "analysis completed"
        if isinstance(result, DegradedAnalysis):
            detail = f"analysis degraded: {result.error}"
            logger.warning(
                result.error,
                extra={
                    "stage": "analyze",
                    "document": source.name,
                    "error_code": resolve_stage_error(stage="analyze", code="schema_parse_failure"),
                },
            )
        return DocumentOutcome(
            document_id=document.document_id,
            stage="analyze",
            state=StageState.DONE,
            detail=detail,
            artifact_path=path,
        )

    def _document_for(self, stage: str, source: Path) -> Document:
        document_id = self.artifacts.document_id_for(stage=stage, path=source)
        if stage == "extract":
            document = Document.from_source(source)
            self.documents[document_id] = document
            return document
        document = self.documents.get(document_id)
        if document is None:
            document = Document(document_id=document_id, source_path=source, format=detect_format(source))
            self.documents[document_id] = document
        return document

    @staticmethod
    def _failure(document: Document, stage: str, *, code: str, detail: str) -> DocumentOutcome:
        error_code = resolve_stage_error(stage=stage, code=code)
        return DocumentOutcome(
            document_id=document.document_id,
            stage=stage,
            state=StageState.FAILED,
            detail=detail,
            error_code=error_code,
            retry_classification=classify_error(error_code),
        )

    @staticmethod
    def _log_outcome(outcome: DocumentOutcome, source: Path) -> None:
        extra: dict[str, object] = {
            "stage": outcome.stage,
            "document": source.name,
            "document_id": outcome.document_id,
            "state": str(outcome.state),
        }
        if outcome.state == StageState.FAILED:
            extra["error_code"] = outcome.error_code
            extra["retry_classification"] = outcome.retry_classification
            logger.error(outcome.detail, extra=extra)
            return
        if outcome.state == StageState.SKIPPED:
            # Skips are progress output only, not worth a log file entry.
            extra.pop("document")
        logger.info("%s: %s", outcome.state, outcome.detail, extra=extra)

    @staticmethod
    def _stage_produced_nothing(reports: list[StageReport], stage: str) -> RunReport:
        logger.error("stage produced no artifacts, stopping run", extra={"stage": stage})
        return RunReport(stages=tuple(reports), failed_stage=stage)
