from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path

from curricula.clients.decoders import build_default_decoders
from curricula.clients.llm import OpenAICompatibleLLMClient
from curricula.clients.ocr import TesseractOCREngine
from curricula.domain.contracts import ArtifactRepository, DocumentDecoder, LLMClient, OCREngine, ResultSink
from curricula.domain.job_requirements import JobRequirements, load_job_requirements
from curricula.domain.models import DocumentFormat
from curricula.domain.use_cases.analyze import AnalysisStage
from curricula.domain.use_cases.extract import ExtractionStage
from curricula.domain.use_cases.standardize import StandardizationStage
from curricula.lib.artifacts import build_artifact_repository, build_result_sink
from curricula.lib.artifacts.layout import DirectoryLayout, build_directory_layout
from curricula.pipeline.orchestrator import PipelineOrchestrator
from curricula.settings import RuntimeSettings


@dataclass
class RuntimeContainer:
    settings: RuntimeSettings
    requirements: JobRequirements
    layout: DirectoryLayout
    artifacts: ArtifactRepository
    sink: ResultSink
    llm: LLMClient
    ocr: OCREngine
    orchestrator: PipelineOrchestrator


def build_runtime_container(
    settings: RuntimeSettings,
    *,
    job_requirements_path: str | Path | None = None,
    llm: LLMClient | None = None,
    ocr: OCREngine | None = None,
    decoders: Mapping[DocumentFormat, DocumentDecoder] | None = None,
    clock: Callable[[], date] | None = None,
) -> RuntimeContainer:
    """Wire every collaborator once; stages never see each other or the orchestrator."""
    if job_requirements_path is not None:
        settings = replace(settings, job_requirements_path=Path(job_requirements_path))
    requirements = load_job_requirements(file_path=settings.resolved_job_requirements_path())

    layout = build_directory_layout(base_path=settings.base_dir, overrides=requirements.directories)
    layout.ensure_directories_exist()
    artifacts = build_artifact_repository(layout=layout)
    sink = build_result_sink(layout=layout, clock=clock)

    if llm is None:
        llm = OpenAICompatibleLLMClient(
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            api_base=settings.llm_api_base,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    if ocr is None:
        ocr = TesseractOCREngine(tesseract_cmd=settings.tesseract_cmd, dpi=settings.ocr_dpi)

    orchestrator = PipelineOrchestrator(
        extraction=ExtractionStage(
            decoders=decoders if decoders is not None else build_default_decoders(),
            ocr=ocr,
            output_language=requirements.output_language,
        ),
        standardization=StandardizationStage(llm=llm, output_language=requirements.output_language),
        analysis=AnalysisStage(llm=llm, requirements=requirements),
        artifacts=artifacts,
        sink=sink,
    )

    return RuntimeContainer(
        settings=settings,
        requirements=requirements,
        layout=layout,
        artifacts=artifacts,
        sink=sink,
        llm=llm,
        ocr=ocr,
        orchestrator=orchestrator,
    )
