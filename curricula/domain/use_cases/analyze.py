from __future__ import annotations

from dataclasses import dataclass

from curricula.domain.contracts import LLMClient
from curricula.domain.job_requirements import JobRequirements
from curricula.domain.json_repair import parse_analysis_response
from curricula.domain.prompts import build_analysis_request
from curricula.lib.artifacts.types import AnalysisResult

COMPONENT_ID = "domain.analyze.document"


@dataclass(frozen=True)
class AnalysisStage:
    llm: LLMClient
    requirements: JobRequirements

    def analyze(self, canonical_text: str) -> AnalysisResult:
        """Score a standardized CV against the job requirements.

        Malformed model output degrades to DegradedAnalysis; only a failing
        model call raises.
        """
        result = self.llm.invoke(
            build_analysis_request(canonical_text=canonical_text, requirements=self.requirements)
        )
        return parse_analysis_response(result.raw_text)
