import logging
from pathlib import Path

import pytest

from curricula.clients.stub import StubDecoder, StubLLMClient, StubOCREngine
from curricula.domain.models import DocumentFormat
from curricula.main import parse_args, run
from curricula.services.bootstrap import build_runtime_container
from tests.integration.pipeline_seed import REPORT_DAY, REPORT_NAME, seed_workspace


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    for key in ("CURRICULA_BASE_DIR", "JOB_REQUIREMENTS_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    root = logging.getLogger()
    previous_handlers = root.handlers[:]
    previous_level = root.level
    yield
    root.handlers[:] = previous_handlers
    root.setLevel(previous_level)


def _use_stubs(monkeypatch: pytest.MonkeyPatch, decoder: StubDecoder) -> StubLLMClient:
    llm = StubLLMClient()

    def _build(settings, *, job_requirements_path=None):
        return build_runtime_container(
            settings,
            job_requirements_path=job_requirements_path,
            llm=llm,
            ocr=StubOCREngine(is_available=False),
            decoders={DocumentFormat.PDF: decoder, DocumentFormat.DOCX: decoder},
            clock=lambda: REPORT_DAY,
        )

    monkeypatch.setattr("curricula.main.build_runtime_container", _build)
    return llm


@pytest.mark.unit
def test_parse_args_accepts_options_after_subcommand() -> None:
    args = parse_args(["analyze", "cv_standardized.txt", "-f", "--base-dir", "/data", "-j", "job.yaml"])

    assert args.command == "analyze"
    assert args.file == "cv_standardized.txt"
    assert args.force is True
    assert args.base_dir == "/data"
    assert args.job_requirements == "job.yaml"


@pytest.mark.unit
def test_cli_requires_a_command(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        run([])

    assert exc_info.value.code == 2
    assert "command" in capsys.readouterr().err


@pytest.mark.unit
def test_cli_reports_missing_job_requirements(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run(["extract", "--base-dir", str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "ERROR:" in captured.err
    assert "job requirements file not found" in captured.err


@pytest.mark.unit
def test_cli_run_all_prints_summary_and_report(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seed_workspace(tmp_path, inputs={"a.pdf": b"a", "b.pdf": b"b"})
    _use_stubs(monkeypatch, StubDecoder(texts={"a.pdf": "Ann"}))

    exit_code = run(["run-all", "--base-dir", str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert "extract: 1 done, 0 skipped, 1 failed" in captured.out
    assert "b: Extracted text is empty, even after OCR attempt [empty_output]" in captured.out
    assert f"Report: {tmp_path / 'report' / REPORT_NAME}" in captured.out

    error_logs = list((tmp_path / "log" / "extract").glob("error_*.log"))
    assert len(error_logs) == 1
    assert "File: b.pdf" in error_logs[0].read_text(encoding="utf-8")


@pytest.mark.unit
def test_cli_missing_file_exits_with_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seed_workspace(tmp_path)
    llm = _use_stubs(monkeypatch, StubDecoder())

    exit_code = run(["process", "missing.txt", "--base-dir", str(tmp_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "ERROR: file not found: missing.txt" in captured.err
    assert llm.calls == []


@pytest.mark.unit
def test_cli_stage_without_output_exits_with_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seed_workspace(tmp_path)
    _use_stubs(monkeypatch, StubDecoder())

    exit_code = run(["extract", "--base-dir", str(tmp_path)])

    assert exit_code == 1
    assert "ERROR: extract produced no output" in capsys.readouterr().err


@pytest.mark.unit
def test_cli_uses_explicit_job_requirements_path(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    config_path = seed_workspace(tmp_path / "elsewhere")
    workspace = tmp_path / "workspace"
    (workspace / "input").mkdir(parents=True)
    (workspace / "input" / "a.pdf").write_bytes(b"a")
    _use_stubs(monkeypatch, StubDecoder(texts={"a.pdf": "Ann"}))

    exit_code = run(["extract", "--base-dir", str(workspace), "-j", str(config_path)])

    assert exit_code == 0
    assert "extract: 1 done" in capsys.readouterr().out
    assert (workspace / "extracted" / "a.txt").read_text(encoding="utf-8") == "Ann"


@pytest.mark.unit
def test_cli_rejects_file_from_wrong_stage(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seed_workspace(tmp_path)
    llm = _use_stubs(monkeypatch, StubDecoder())
    (tmp_path / "processed").mkdir(parents=True, exist_ok=True)
    (tmp_path / "processed" / "cv.txt").write_text("## Skills\n- Go", encoding="utf-8")

    exit_code = run(["analyze", "cv.txt", "--base-dir", str(tmp_path)])

    assert exit_code == 1
    assert "ERROR: cv.txt is not an input of the analyze stage" in capsys.readouterr().err
    assert llm.calls == []
    assert not (tmp_path / "analysis" / "cv.txt_analysis.txt").exists()
