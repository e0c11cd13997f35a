from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Contract models shared between the analysis stage, the repair layer and
# the consolidated CSV. They define payload shape only.

NOT_AVAILABLE = "N/A"
DEGRADED_ERROR = "Model did not return valid JSON"

# Field order inside csvData as requested from the model.
RECORD_FIELDS: tuple[str, ...] = (
    "score",
    "sentiment",
    "name",
    "email",
    "incomplete_info",
    "education",
    "key_skills",
)

# Column order of the consolidated report; "file" is the document id.
REPORT_COLUMNS: tuple[str, ...] = (
    "file",
    "name",
    "email",
    "incomplete_info",
    "education",
    "key_skills",
    "score",
    "sentiment",
)

REPORT_HEADER: tuple[str, ...] = (
    "File",
    "Name",
    "Email",
    "Incomplete Info",
    "Education",
    "Key Skills",
    "Score",
    "Sentiment",
)


def format_score(value: float) -> str:
    return f"{value:g}"


class AnalysisRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    score: float = Field(ge=0, le=100)
    sentiment: str
    name: str
    email: str
    incomplete_info: str
    # Highest education level.
    education: str
    # Top skills, flattened to a comma-separated string for spreadsheets.
    key_skills: str

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("score must be a number")
        if isinstance(value, str):
            return value.strip().removesuffix("%").strip()
        return value

    @field_validator(
        "sentiment",
        "name",
        "email",
        "incomplete_info",
        "education",
        "key_skills",
        mode="before",
    )
    @classmethod
    def _flatten_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item).strip() for item in value if str(item).strip())
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def csv_values(self) -> dict[str, str]:
        values = self.model_dump(mode="json")
        values["score"] = format_score(self.score)
        return {key: str(values[key]) for key in RECORD_FIELDS}


class AnalysisPayload(BaseModel):
    # Top-level JSON object the analysis prompt asks for.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    report: str
    csv_data: AnalysisRecord = Field(alias="csvData")


@dataclass(frozen=True)
class ParsedAnalysis:
    report: str
    record: AnalysisRecord
    kind: Literal["parsed"] = "parsed"

    def csv_values(self) -> dict[str, str]:
        return self.record.csv_values()


@dataclass(frozen=True)
class DegradedAnalysis:
    # Sanitized model text, kept so the human-readable content is never lost.
    report: str
    error: str = DEGRADED_ERROR
    kind: Literal["degraded"] = "degraded"

    def csv_values(self) -> dict[str, str]:
        return {key: NOT_AVAILABLE for key in RECORD_FIELDS}


AnalysisResult = ParsedAnalysis | DegradedAnalysis
