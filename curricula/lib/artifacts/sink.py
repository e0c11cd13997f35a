from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from curricula.domain.contracts import ResultSink
from curricula.lib.artifacts.codecs import encode_report_header, encode_report_row
from curricula.lib.artifacts.layout import ensure_directory
from curricula.lib.artifacts.types import AnalysisResult

REPORT_FILE_PREFIX = "consolidated_analysis_"


@dataclass(frozen=True)
class CsvResultSink(ResultSink):
    """Append-only consolidated report, one file per calendar day.

    Every row is appended and flushed on its own, so the file is parseable
    after each successful append. Single writer only.
    """

    report_dir: Path
    clock: Callable[[], date] = field(default=date.today)

    def report_path(self) -> Path:
        return self.report_dir / f"{REPORT_FILE_PREFIX}{self.clock().isoformat()}.csv"

    def append(self, document_id: str, result: AnalysisResult) -> Path:
        path = self.report_path()
        ensure_directory(path.parent)
        needs_header = not path.exists() or path.stat().st_size == 0
        with path.open("ab") as handle:
            if needs_header:
                handle.write(encode_report_header())
            handle.write(encode_report_row(document_id=document_id, result=result))
            handle.flush()
        return path

    def generate_csv_report(self) -> Path:
        return self.report_path()
