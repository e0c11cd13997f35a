from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from curricula.lib.artifacts.types import AnalysisPayload, AnalysisResult, DegradedAnalysis, ParsedAnalysis

COMPONENT_ID = "domain.analysis.json_repair"

# First fenced block, with or without a language tag.
FENCED_BLOCK_RE = re.compile(r"```(?:[A-Za-z0-9_+-]+)?\s*(.*?)\s*```", re.DOTALL)

_SHORT_ESCAPES: dict[str, str] = {
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

logger = logging.getLogger("curricula.llm")


def to_valid_text(raw: str | bytes) -> str:
    """Drop byte sequences (or code points) that are not valid UTF-8."""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="ignore")
    return raw.encode("utf-8", errors="ignore").decode("utf-8")


def escape_control_characters(text: str) -> str:
    """Escape raw control characters that appear inside JSON string literals.

    Tracks whether the cursor is inside a quoted string and whether the
    previous character was an unconsumed backslash. Characters outside
    strings, quotes and escape markers pass through unchanged.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            out.append(ch)
            escaped = False
            continue
        if ch == "\\":
            out.append(ch)
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            out.append(ch)
            continue
        if in_string and ord(ch) <= 0x1F:
            out.append(_SHORT_ESCAPES.get(ch, f"\\u{ord(ch):04X}"))
        else:
            out.append(ch)
    return "".join(out)


def sanitize_json_text(raw: str | bytes) -> str:
    return escape_control_characters(to_valid_text(raw))


def extract_fenced_block(text: str) -> str | None:
    match = FENCED_BLOCK_RE.search(text)
    if match is None:
        return None
    return match.group(1)


def parse_analysis_response(raw: str | bytes) -> AnalysisResult:
    """Recover an analysis result from untrusted model output.

    Never raises: output that is neither fenced nor bare JSON of the expected
    shape degrades to a sentinel result carrying the sanitized text.
    """
    text = sanitize_json_text(raw)

    fenced = extract_fenced_block(text)
    if fenced is not None:
        parsed = _try_parse_payload(fenced)
        if parsed is not None:
            return parsed

    parsed = _try_parse_payload(text)
    if parsed is not None:
        return parsed

    logger.warning("model output is not valid analysis JSON, degrading", extra={"chars": len(text)})
    return DegradedAnalysis(report=text)


def _try_parse_payload(candidate: str) -> ParsedAnalysis | None:
    try:
        loaded = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(loaded, dict):
        return None
    try:
        payload = AnalysisPayload.model_validate(loaded)
    except ValidationError as exc:
        logger.info("analysis JSON failed schema validation", extra={"errors": exc.error_count()})
        return None
    return ParsedAnalysis(report=payload.report, record=payload.csv_data)
