from __future__ import annotations

from dataclasses import dataclass

from curricula.domain.contracts import LLMClient
from curricula.domain.prompts import build_standardize_request

COMPONENT_ID = "domain.standardize.document"


@dataclass(frozen=True)
class StandardizationStage:
    llm: LLMClient
    output_language: str

    def standardize(self, raw_text: str) -> str:
        """Single model round trip; blank output is the caller's failure to handle."""
        result = self.llm.invoke(
            build_standardize_request(raw_text=raw_text, output_language=self.output_language)
        )
        return result.raw_text
