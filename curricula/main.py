from __future__ import annotations

import argparse
import logging
import sys
import uuid
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from curricula.domain.errors import DomainValidationError
from curricula.domain.models import AnalysisReport, RunReport, StageReport
from curricula.logging_setup import configure_logging
from curricula.services.bootstrap import build_runtime_container
from curricula.settings import runtime_settings_from_env

logger = logging.getLogger("curricula.runtime")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--base-dir", default=None, help="Root of the pipeline directories")
    common.add_argument(
        "-j",
        "--job-requirements",
        default=None,
        help="Job requirements file (JSON or YAML)",
    )
    common.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Reprocess documents whose output already exists",
    )

    parser = argparse.ArgumentParser(prog="curricula", description="CV processing pipeline")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("extract", parents=[common], help="Extract text from input documents")
    process = commands.add_parser("process", parents=[common], help="Standardize extracted text")
    process.add_argument("file", nargs="?", default=None, help="Single extracted file to process")
    analyze = commands.add_parser("analyze", parents=[common], help="Analyze standardized CVs")
    analyze.add_argument("file", nargs="?", default=None, help="Single standardized file to analyze")
    commands.add_parser("run-all", parents=[common], help="Run extract, process and analyze in order")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()

    settings = runtime_settings_from_env()
    if args.base_dir is not None:
        settings = replace(settings, base_dir=Path(args.base_dir))
    configure_logging(level=settings.log_level)
    run_id = str(uuid.uuid4())

    try:
        container = build_runtime_container(settings, job_requirements_path=args.job_requirements)
    except DomainValidationError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 1

    configure_logging(log_dir=container.layout.path("log"), level=settings.log_level)
    logger.info(
        "runtime initialized",
        extra={"run_id": run_id, "command": args.command},
    )

    orchestrator = container.orchestrator
    files = [args.file] if getattr(args, "file", None) else None
    try:
        if args.command == "extract":
            return _finish_stage(orchestrator.extract(force=args.force))
        if args.command == "process":
            return _finish_stage(orchestrator.process(files, force=args.force))
        if args.command == "analyze":
            return _finish_stage(orchestrator.analyze(files, force=args.force))
        return _finish_run(orchestrator.run_all(force=args.force))
    except DomainValidationError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        return 1


def _write_summary(report: StageReport) -> None:
    sys.stdout.write(
        f"{report.stage}: {len(report.done)} done, {len(report.skipped)} skipped, "
        f"{len(report.failed)} failed\n"
    )
    for outcome in report.failed:
        sys.stdout.write(f"  {outcome.document_id}: {outcome.detail} [{outcome.error_code}]\n")


def _finish_stage(report: StageReport) -> int:
    _write_summary(report)
    if isinstance(report, AnalysisReport):
        if report.report_path is None:
            sys.stderr.write("ERROR: analysis produced no report\n")
            return 1
        sys.stdout.write(f"Report: {report.report_path}\n")
        return 0
    if not report.artifacts:
        sys.stderr.write(f"ERROR: {report.stage} produced no output\n")
        return 1
    return 0


def _finish_run(report: RunReport) -> int:
    for stage_report in report.stages:
        _write_summary(stage_report)
    if not report.ok:
        sys.stderr.write(f"ERROR: pipeline stopped, {report.failed_stage} produced no output\n")
        return 1
    sys.stdout.write(f"Report: {report.report_path}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
