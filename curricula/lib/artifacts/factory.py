from __future__ import annotations

from collections.abc import Callable
from datetime import date

from curricula.domain.contracts import ArtifactRepository, ResultSink
from curricula.lib.artifacts.layout import DirectoryLayout
from curricula.lib.artifacts.repository import FilesystemArtifactRepository
from curricula.lib.artifacts.sink import CsvResultSink

DEFAULT_ARTIFACT_ENCODING = "utf-8"


def build_artifact_repository(
    *,
    layout: DirectoryLayout,
    encoding: str | None = None,
) -> ArtifactRepository:
    return FilesystemArtifactRepository(layout=layout, encoding=encoding or DEFAULT_ARTIFACT_ENCODING)


def build_result_sink(
    *,
    layout: DirectoryLayout,
    clock: Callable[[], date] | None = None,
) -> ResultSink:
    if clock is None:
        return CsvResultSink(report_dir=layout.path("report"))
    return CsvResultSink(report_dir=layout.path("report"), clock=clock)
