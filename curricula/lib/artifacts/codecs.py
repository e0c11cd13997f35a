from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from curricula.lib.artifacts.types import REPORT_COLUMNS, REPORT_HEADER, AnalysisResult

REPORT_ENCODING = "cp1252"
REPORT_DELIMITER = ";"


def encode_report_header() -> bytes:
    return _encode_line(REPORT_HEADER)


def encode_report_row(*, document_id: str, result: AnalysisResult) -> bytes:
    values = {"file": document_id, **result.csv_values()}
    return _encode_line([values[column] for column in REPORT_COLUMNS])


def decode_report_rows(payload: bytes) -> list[list[str]]:
    text = payload.decode(REPORT_ENCODING, errors="replace")
    return [row for row in csv.reader(io.StringIO(text, newline=""), delimiter=REPORT_DELIMITER) if row]


def _encode_line(values: Sequence[str]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=REPORT_DELIMITER, lineterminator="\n")
    writer.writerow(values)
    # Downstream spreadsheets expect a legacy single-byte encoding.
    return buffer.getvalue().encode(REPORT_ENCODING, errors="replace")
