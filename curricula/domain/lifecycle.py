from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from curricula.domain.errors import DomainInvariantError

StageName = Literal["extract", "process", "analyze"]

STAGE_ORDER: tuple[StageName, ...] = ("extract", "process", "analyze")


class StageState(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StageLifecycle:
    stage: StageName
    # Directory kinds, resolved by DirectoryLayout.
    source_kind: str
    output_kind: str
    # Suffix stripped from a source file name to recover the document id.
    source_suffix: str | None
    output_suffix: str
    completion_flag: str


STAGE_LIFECYCLES: dict[str, StageLifecycle] = {
    "extract": StageLifecycle(
        stage="extract",
        source_kind="input",
        output_kind="extracted",
        source_suffix=None,
        output_suffix=".txt",
        completion_flag="extracted",
    ),
    "process": StageLifecycle(
        stage="process",
        source_kind="extracted",
        output_kind="processed",
        source_suffix=".txt",
        output_suffix="_standardized.txt",
        completion_flag="standardized",
    ),
    "analyze": StageLifecycle(
        stage="analyze",
        source_kind="processed",
        output_kind="analysis",
        source_suffix="_standardized.txt",
        output_suffix="_analysis.txt",
        completion_flag="analyzed",
    ),
}


ALLOWED_TRANSITIONS: dict[StageState, set[StageState]] = {
    StageState.PENDING: {StageState.IN_PROGRESS, StageState.SKIPPED},
    StageState.IN_PROGRESS: {StageState.DONE, StageState.FAILED},
    StageState.DONE: set(),
    StageState.SKIPPED: set(),
    StageState.FAILED: set(),
}


def stage_lifecycle(stage: str) -> StageLifecycle:
    lifecycle = STAGE_LIFECYCLES.get(stage)
    if lifecycle is None:
        raise ValueError(f"unsupported stage: {stage}")
    return lifecycle


def ensure_transition(*, from_state: StageState, to_state: StageState) -> None:
    if to_state not in ALLOWED_TRANSITIONS[from_state]:
        raise DomainInvariantError(f"invalid stage transition: {from_state} -> {to_state}")
