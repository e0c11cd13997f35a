from datetime import date
from pathlib import Path

import pytest

from curricula.lib.artifacts.codecs import (
    decode_report_rows,
    encode_report_header,
    encode_report_row,
)
from curricula.lib.artifacts.sink import CsvResultSink
from curricula.lib.artifacts.types import AnalysisRecord, DegradedAnalysis, ParsedAnalysis

HEADER = ["File", "Name", "Email", "Incomplete Info", "Education", "Key Skills", "Score", "Sentiment"]


def _parsed(**overrides: object) -> ParsedAnalysis:
    data: dict[str, object] = {
        "score": 72,
        "sentiment": "Positive",
        "name": "John Doe",
        "email": "john@example.com",
        "incomplete_info": "None",
        "education": "BSc",
        "key_skills": "Go, SQL",
    }
    data.update(overrides)
    return ParsedAnalysis(report="## Strengths\n- Go", record=AnalysisRecord.model_validate(data))


@pytest.mark.unit
def test_header_uses_semicolons_and_cp1252() -> None:
    assert encode_report_header() == (
        b"File;Name;Email;Incomplete Info;Education;Key Skills;Score;Sentiment\n"
    )


@pytest.mark.unit
def test_row_follows_report_column_order() -> None:
    row = encode_report_row(document_id="john", result=_parsed())

    assert row == b"john;John Doe;john@example.com;None;BSc;Go, SQL;72;Positive\n"


@pytest.mark.unit
def test_row_quotes_delimiters_and_encodes_accents() -> None:
    row = encode_report_row(document_id="joão", result=_parsed(name="João; Silva", sentiment="Ótimo"))

    assert row.startswith("joão;\"João; Silva\"".encode("cp1252"))
    assert decode_report_rows(row)[0][1] == "João; Silva"
    assert decode_report_rows(row)[0][7] == "Ótimo"


@pytest.mark.unit
def test_unencodable_characters_are_replaced() -> None:
    row = encode_report_row(document_id="cv", result=_parsed(name="Li 李"))

    assert decode_report_rows(row)[0][1] == "Li ?"


@pytest.mark.unit
def test_degraded_row_uses_not_available_markers() -> None:
    row = encode_report_row(document_id="cv", result=DegradedAnalysis(report="prose"))

    assert decode_report_rows(row) == [["cv"] + ["N/A"] * 7]


@pytest.mark.unit
def test_sink_writes_header_once_per_day(tmp_path: Path) -> None:
    sink = CsvResultSink(report_dir=tmp_path / "report", clock=lambda: date(2024, 5, 1))

    first = sink.append("a", _parsed(name="Ann"))
    second = sink.append("b", DegradedAnalysis(report="prose"))

    assert first == second == tmp_path / "report" / "consolidated_analysis_2024-05-01.csv"
    rows = decode_report_rows(first.read_bytes())
    assert rows[0] == HEADER
    assert [row[0] for row in rows[1:]] == ["a", "b"]
    assert rows[1][1] == "Ann"


@pytest.mark.unit
def test_sink_rolls_over_by_date(tmp_path: Path) -> None:
    days = iter([date(2024, 5, 1), date(2024, 5, 2)])
    sink = CsvResultSink(report_dir=tmp_path, clock=lambda: next(days))

    first = sink.append("a", _parsed())
    second = sink.append("b", _parsed())

    assert first.name == "consolidated_analysis_2024-05-01.csv"
    assert second.name == "consolidated_analysis_2024-05-02.csv"
    assert decode_report_rows(second.read_bytes())[0] == HEADER


@pytest.mark.unit
def test_generate_csv_report_returns_current_day_path(tmp_path: Path) -> None:
    sink = CsvResultSink(report_dir=tmp_path, clock=lambda: date(2024, 5, 1))

    assert sink.generate_csv_report() == tmp_path / "consolidated_analysis_2024-05-01.csv"


@pytest.mark.unit
def test_empty_existing_file_gets_header(tmp_path: Path) -> None:
    sink = CsvResultSink(report_dir=tmp_path, clock=lambda: date(2024, 5, 1))
    sink.report_path().touch()

    path = sink.append("a", _parsed())

    assert decode_report_rows(path.read_bytes())[0] == HEADER
