from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from curricula.domain.dto import LLMClientRequest, LLMClientResult
from curricula.domain.prompts import STANDARD_SECTIONS


@dataclass
class StubDecoder:
    # Keyed by source file name.
    texts: dict[str, str] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[Path] = field(default_factory=list)

    def decode(self, path: Path) -> str:
        self.calls.append(path)
        failure = self.failures.get(path.name)
        if failure is not None:
            raise failure
        return self.texts.get(path.name, "")


@dataclass
class StubOCREngine:
    texts: dict[str, str] = field(default_factory=dict)
    is_available: bool = True
    calls: list[tuple[Path, str]] = field(default_factory=list)

    def available(self) -> bool:
        return self.is_available

    def recognize(self, path: Path, *, language_hint: str) -> str:
        self.calls.append((path, language_hint))
        return self.texts.get(path.name, "")


def stub_standardized_text(raw_text: str) -> str:
    first_line = next((line.strip() for line in raw_text.splitlines() if line.strip()), "")
    sections = []
    for name in STANDARD_SECTIONS:
        body = f"- {first_line}" if name == "Personal Information" and first_line else "- Not informed"
        sections.append(f"## {name}\n{body}")
    return "\n\n".join(sections)


DEFAULT_ANALYSIS_JSON: dict[str, object] = {
    "report": (
        "## Strengths\n- Solid core skills\n\n## Concerns\n- Limited leadership evidence\n\n"
        "## Overall Fit\nGood\n\n## Score\n72\n\n## Sentiment\nPositive\n\n## Incomplete Info\nNone"
    ),
    "csvData": {
        "score": 72,
        "sentiment": "Positive",
        "name": "Stub Candidate",
        "email": "stub@example.com",
        "incomplete_info": "None",
        "education": "Bachelor",
        "key_skills": "Python, SQL, Docker, Git, Linux",
    },
}


@dataclass
class StubLLMClient:
    """Deterministic model keyed by request purpose.

    Unconfigured purposes answer with a five-section document for
    standardization and DEFAULT_ANALYSIS_JSON for analysis.
    """

    responses: dict[str, str] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[LLMClientRequest] = field(default_factory=list)

    def invoke(self, request: LLMClientRequest) -> LLMClientResult:
        self.calls.append(request)
        failure = self.failures.get(request.purpose)
        if failure is not None:
            raise failure
        text = self.responses.get(request.purpose)
        if text is None:
            text = self._default_response(request)
        return LLMClientResult(raw_text=text, tokens_input=128, tokens_output=256, latency_ms=120)

    def calls_for(self, purpose: str) -> list[LLMClientRequest]:
        return [call for call in self.calls if call.purpose == purpose]

    @staticmethod
    def _default_response(request: LLMClientRequest) -> str:
        if request.purpose == "standardize":
            content = request.messages[-1].content if request.messages else ""
            _, _, raw_text = content.partition(":\n\n")
            return stub_standardized_text(raw_text)
        return json.dumps(DEFAULT_ANALYSIS_JSON)
