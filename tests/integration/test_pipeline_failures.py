"""Per-document fault isolation and run-level stop conditions.

How to run only this file:
- `pytest -q tests/integration/test_pipeline_failures.py`
"""

from dataclasses import replace
from pathlib import Path

import pytest

from curricula.clients.stub import StubDecoder, StubLLMClient, StubOCREngine
from curricula.domain.errors import DocumentNotFoundError, GenerativeCallFailure
from curricula.domain.lifecycle import StageState
from curricula.lib.artifacts.codecs import decode_report_rows
from curricula.lib.artifacts.types import AnalysisResult
from tests.integration.pipeline_seed import REPORT_NAME, build_stub_container, seed_workspace


@pytest.mark.integration
def test_one_broken_document_does_not_stop_the_batch(tmp_path: Path) -> None:
    seed_workspace(tmp_path, inputs={"a.pdf": b"a", "b.pdf": b"b", "c.docx": b"c"})
    decoder = StubDecoder(
        texts={"a.pdf": "Ann Smith", "c.docx": "Carl Jones"},
        failures={"b.pdf": ValueError("broken xref table")},
    )
    container = build_stub_container(tmp_path, decoder=decoder, ocr=StubOCREngine())

    report = container.orchestrator.run_all()

    assert report.ok is True
    extract = report.stages[0]
    assert [item.document_id for item in extract.done] == ["a", "c"]
    failed = extract.failed[0]
    assert failed.document_id == "b"
    assert failed.error_code == "decode_failure"
    assert failed.retry_classification == "terminal"
    assert "broken xref table" in failed.detail
    assert not (tmp_path / "extracted" / "b.txt").exists()

    assert [item.document_id for item in report.stages[1].done] == ["a", "c"]
    rows = decode_report_rows((tmp_path / "report" / REPORT_NAME).read_bytes())
    assert [row[0] for row in rows[1:]] == ["a", "c"]
    assert container.orchestrator.documents["b"].extracted is False


@pytest.mark.integration
def test_decode_failure_recovered_by_ocr(tmp_path: Path) -> None:
    seed_workspace(tmp_path, inputs={"b.pdf": b"b"})
    container = build_stub_container(
        tmp_path,
        decoder=StubDecoder(failures={"b.pdf": MemoryError()}),
        ocr=StubOCREngine(texts={"b.pdf": "Bea Costa"}),
    )

    report = container.orchestrator.extract()

    assert report.done[0].detail == "extracted with OCR"
    assert (tmp_path / "extracted" / "b.txt").read_text(encoding="utf-8") == "Bea Costa"


@pytest.mark.integration
def test_empty_document_without_ocr_fails_with_empty_output(tmp_path: Path) -> None:
    seed_workspace(tmp_path, inputs={"blank.pdf": b"x"})
    container = build_stub_container(tmp_path, ocr=StubOCREngine(is_available=False))

    report = container.orchestrator.run_all()

    assert report.ok is False
    assert report.failed_stage == "extract"
    assert len(report.stages) == 1
    assert report.stages[0].failed[0].error_code == "empty_output"
    assert container.orchestrator.ocr_status().startswith("OCR not available")


@pytest.mark.integration
def test_empty_input_directory_stops_run_at_extract(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    llm = StubLLMClient()

    report = build_stub_container(tmp_path, llm=llm).orchestrator.run_all()

    assert report.failed_stage == "extract"
    assert report.report_path is None
    assert llm.calls == []


@pytest.mark.integration
def test_generative_failure_stops_run_before_analysis(tmp_path: Path) -> None:
    seed_workspace(tmp_path, inputs={"a.pdf": b"a"})
    llm = StubLLMClient(failures={"standardize": GenerativeCallFailure("quota exceeded")})
    container = build_stub_container(tmp_path, decoder=StubDecoder(texts={"a.pdf": "Ann"}), llm=llm)

    report = container.orchestrator.run_all()

    assert report.failed_stage == "process"
    assert [stage.stage for stage in report.stages] == ["extract", "process"]
    failed = report.stages[1].failed[0]
    assert failed.error_code == "generative_call_failure"
    assert failed.retry_classification == "recoverable"
    assert llm.calls_for("analyze") == []
    assert not (tmp_path / "report" / REPORT_NAME).exists()


@pytest.mark.integration
def test_unexpected_error_is_recorded_as_internal_error(tmp_path: Path) -> None:
    seed_workspace(tmp_path, inputs={"a.pdf": b"a"})
    llm = StubLLMClient(failures={"analyze": RuntimeError("boom")})
    container = build_stub_container(tmp_path, decoder=StubDecoder(texts={"a.pdf": "Ann"}), llm=llm)

    report = container.orchestrator.run_all()

    assert report.failed_stage == "analyze"
    failed = report.stages[2].failed[0]
    assert failed.error_code == "internal_error"
    assert failed.detail == "boom"


@pytest.mark.integration
def test_blank_extracted_text_never_reaches_the_model(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    llm = StubLLMClient()
    container = build_stub_container(tmp_path, llm=llm)
    (tmp_path / "extracted" / "blank.txt").write_text("  \n\t", encoding="utf-8")

    report = container.orchestrator.process()

    assert report.failed[0].error_code == "empty_output"
    assert llm.calls == []


@pytest.mark.integration
def test_blank_model_output_fails_standardization(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    llm = StubLLMClient(responses={"standardize": "   "})
    container = build_stub_container(tmp_path, llm=llm)
    (tmp_path / "extracted" / "cv.txt").write_text("Ann", encoding="utf-8")

    report = container.orchestrator.process()

    assert report.failed[0].error_code == "empty_output"
    assert not (tmp_path / "processed" / "cv_standardized.txt").exists()


@pytest.mark.integration
def test_degraded_analysis_still_reaches_report(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    llm = StubLLMClient(responses={"analyze": "The candidate looks strong overall."})
    container = build_stub_container(tmp_path, llm=llm)
    (tmp_path / "processed" / "cv_standardized.txt").write_text("## Skills\n- Go", encoding="utf-8")

    report = container.orchestrator.analyze()

    outcome = report.outcomes[0]
    assert outcome.state == StageState.DONE
    assert outcome.detail == "analysis degraded: Model did not return valid JSON"
    assert (tmp_path / "analysis" / "cv_analysis.txt").read_text(encoding="utf-8") == (
        "The candidate looks strong overall."
    )
    rows = decode_report_rows(report.report_path.read_bytes())
    assert rows[1] == ["cv"] + ["N/A"] * 7


@pytest.mark.integration
def test_missing_requested_file_fails_before_any_dispatch(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    llm = StubLLMClient()
    container = build_stub_container(tmp_path, llm=llm)
    (tmp_path / "extracted" / "cv.txt").write_text("Ann", encoding="utf-8")

    with pytest.raises(DocumentNotFoundError, match="missing.txt"):
        container.orchestrator.process(["cv.txt", "missing.txt"])
    assert llm.calls == []
    assert not (tmp_path / "processed" / "cv_standardized.txt").exists()


@pytest.mark.integration
def test_single_file_processing_only_touches_that_file(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    container = build_stub_container(tmp_path)
    for name in ("a.txt", "b.txt"):
        (tmp_path / "extracted" / name).write_text(name, encoding="utf-8")

    report = container.orchestrator.process(["b.txt"])

    assert [item.document_id for item in report.done] == ["b"]
    assert not (tmp_path / "processed" / "a_standardized.txt").exists()


@pytest.mark.integration
def test_report_header_written_once_across_runs(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    first = build_stub_container(tmp_path)
    (tmp_path / "processed" / "a_standardized.txt").write_text("## Skills\n- Go", encoding="utf-8")
    first.orchestrator.analyze()

    second = build_stub_container(tmp_path)
    (tmp_path / "processed" / "b_standardized.txt").write_text("## Skills\n- SQL", encoding="utf-8")
    second.orchestrator.analyze(["b_standardized.txt"])

    rows = decode_report_rows((tmp_path / "report" / REPORT_NAME).read_bytes())
    assert [row[0] for row in rows] == ["File", "a", "b"]


@pytest.mark.integration
def test_analyze_without_inputs_produces_no_report(tmp_path: Path) -> None:
    seed_workspace(tmp_path)

    report = build_stub_container(tmp_path).orchestrator.analyze()

    assert report.outcomes == ()
    assert report.report_path is None


class _LockedReportSink:
    def append(self, document_id: str, result: AnalysisResult) -> Path:
        raise PermissionError("consolidated report is locked")

    def generate_csv_report(self) -> Path:
        raise AssertionError("no report expected")


@pytest.mark.integration
def test_failed_report_append_leaves_document_pending(tmp_path: Path) -> None:
    seed_workspace(tmp_path)
    container = build_stub_container(tmp_path)
    (tmp_path / "processed" / "cv_standardized.txt").write_text("## Skills\n- Go", encoding="utf-8")
    locked = replace(container.orchestrator, sink=_LockedReportSink())

    first = locked.analyze()

    assert first.failed[0].error_code == "internal_error"
    assert first.report_path is None
    assert not (tmp_path / "analysis" / "cv_analysis.txt").exists()

    second = container.orchestrator.analyze()

    assert [item.state for item in second.outcomes] == [StageState.DONE]
    rows = decode_report_rows((tmp_path / "report" / REPORT_NAME).read_bytes())
    assert [row[0] for row in rows] == ["File", "cv"]
