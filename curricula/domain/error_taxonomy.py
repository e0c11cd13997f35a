from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

# Canonical error vocabulary for all stages.
ErrorCode = Literal[
    "decode_failure",
    "empty_output",
    "generative_call_failure",
    "schema_parse_failure",
    "internal_error",
]

RetryClassification = Literal["recoverable", "terminal"]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "decode_failure",
    "empty_output",
    "generative_call_failure",
    "schema_parse_failure",
    "internal_error",
)

# A later run may succeed for these without touching the input document.
RECOVERABLE_ERROR_CODES: frozenset[ErrorCode] = frozenset(
    {
        "generative_call_failure",
        "internal_error",
    }
)

# Stage-specific allowlist. If a stage emits a code outside this map,
# it is normalized to internal_error by resolve_stage_error().
STAGE_ERROR_MAP: Mapping[str, frozenset[ErrorCode]] = {
    "extract": frozenset(
        {
            "decode_failure",
            "empty_output",
            "internal_error",
        }
    ),
    "process": frozenset(
        {
            "empty_output",
            "generative_call_failure",
            "internal_error",
        }
    ),
    "analyze": frozenset(
        {
            "empty_output",
            "generative_call_failure",
            "schema_parse_failure",
            "internal_error",
        }
    ),
}


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def classify_error(code: ErrorCode) -> RetryClassification:
    if code in RECOVERABLE_ERROR_CODES:
        return "recoverable"
    return "terminal"


def resolve_stage_error(*, stage: str, code: str) -> ErrorCode:
    allowed = STAGE_ERROR_MAP.get(stage, frozenset({"internal_error"}))
    if code in allowed and is_canonical_error_code(code):
        return code
    return "internal_error"
