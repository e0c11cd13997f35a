from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from curricula.domain.job_requirements import DEFAULT_JOB_REQUIREMENTS_PATH


@dataclass(frozen=True)
class RuntimeSettings:
    base_dir: Path = Path(".")
    job_requirements_path: Path | None = None
    llm_api_key: str | None = None
    llm_api_base: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 8192
    llm_temperature: float = 0.2
    llm_timeout_seconds: int = 120
    tesseract_cmd: str | None = None
    ocr_dpi: int = 300
    log_level: str = "INFO"

    def resolved_job_requirements_path(self) -> Path:
        if self.job_requirements_path is not None:
            return self.job_requirements_path
        return self.base_dir / DEFAULT_JOB_REQUIREMENTS_PATH


def runtime_settings_from_env() -> RuntimeSettings:
    job_requirements = os.getenv("JOB_REQUIREMENTS_PATH")
    return RuntimeSettings(
        base_dir=Path(os.getenv("CURRICULA_BASE_DIR") or "."),
        job_requirements_path=Path(job_requirements) if job_requirements else None,
        llm_api_key=os.getenv("LLM_API_KEY") or None,
        llm_api_base=os.getenv("LLM_API_BASE") or None,
        llm_model=os.getenv("LLM_MODEL") or "gpt-4o-mini",
        llm_max_tokens=_env_int("LLM_MAX_TOKENS", 8192),
        llm_temperature=_env_float("LLM_TEMPERATURE", 0.2),
        llm_timeout_seconds=_env_int("LLM_TIMEOUT_SECONDS", 120),
        tesseract_cmd=os.getenv("TESSERACT_CMD") or None,
        ocr_dpi=_env_int("OCR_DPI", 300),
        log_level=os.getenv("LOG_LEVEL") or "INFO",
    )


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = float(value)
    except ValueError:
        return default

    return parsed if parsed >= 0 else default
