from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml

from curricula.domain.errors import ConfigurationError

DEFAULT_JOB_REQUIREMENTS_PATH = "config/job-requirements.json"


@dataclass(frozen=True)
class EvaluationCriterion:
    name: str
    weight: float
    description: str


@dataclass(frozen=True)
class JobRequirements:
    output_language: str
    job_description: str
    position: str
    evaluation_criteria: tuple[EvaluationCriterion, ...]
    directories: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def total_weight(self) -> float:
        return sum(item.weight for item in self.evaluation_criteria)


def load_job_requirements(*, file_path: str | Path) -> JobRequirements:
    path = Path(file_path)
    if not path.is_file():
        raise ConfigurationError(f"job requirements file not found: {path}")
    try:
        # JSON documents are valid YAML, so one loader covers both formats.
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid job requirements file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("job requirements must be an object")
    return parse_job_requirements(data)


def parse_job_requirements(data: dict[str, object]) -> JobRequirements:
    output_language = _required_str(data, "output_language")
    job_description = _required_str(data, "job_description")
    position = _required_str(data, "position")

    criteria_raw = _required_obj(data, "evaluation_criteria")
    if not criteria_raw:
        raise ConfigurationError("evaluation_criteria must contain at least one criterion")
    criteria: list[EvaluationCriterion] = []
    for name, item in criteria_raw.items():
        if not isinstance(item, dict):
            raise ConfigurationError(f"evaluation_criteria.{name} must be object")
        weight = _required_float(item, "weight", path=f"evaluation_criteria.{name}")
        if weight < 0:
            raise ConfigurationError(f"evaluation_criteria.{name}.weight must be >= 0")
        criteria.append(
            EvaluationCriterion(
                name=str(name),
                weight=weight,
                description=_required_str(item, "description", path=f"evaluation_criteria.{name}"),
            )
        )
    if sum(item.weight for item in criteria) <= 0:
        raise ConfigurationError("evaluation_criteria total weight must be > 0")

    directories_raw = data.get("directories")
    directories: dict[str, str] = {}
    if directories_raw is not None:
        if not isinstance(directories_raw, dict):
            raise ConfigurationError("directories must be object")
        for kind, name in directories_raw.items():
            if not isinstance(name, str) or not name:
                raise ConfigurationError(f"directories.{kind} must be non-empty string")
            directories[str(kind)] = name

    return JobRequirements(
        output_language=output_language,
        job_description=job_description,
        position=position,
        evaluation_criteria=tuple(criteria),
        directories=MappingProxyType(directories),
    )


def _required_str(data: dict[str, object], key: str, *, path: str = "") -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{_dotted(path, key)} is required and must be non-empty string")
    return value


def _required_float(data: dict[str, object], key: str, *, path: str = "") -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{_dotted(path, key)} is required and must be number")
    return float(value)


def _required_obj(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ConfigurationError(f"{key} is required and must be object")
    return value


def _dotted(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key
