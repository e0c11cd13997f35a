from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

CONTEXT_KEYS: tuple[str, ...] = (
    "run_id",
    "command",
    "stage",
    "document",
    "document_id",
    "state",
    "error_code",
    "retry_classification",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class StageFileHandler(logging.Handler):
    """Appends document-scoped records to ``<log_dir>/<stage>/<level>_<date>.log``.

    Only records carrying both ``stage`` and ``document`` are written.
    """

    def __init__(self, log_dir: Path, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.log_dir = log_dir

    def emit(self, record: logging.LogRecord) -> None:
        stage = getattr(record, "stage", None)
        document = getattr(record, "document", None)
        if not stage or not document:
            return
        try:
            now = datetime.fromtimestamp(record.created)
            kind = "error" if record.levelno >= logging.ERROR else record.levelname.lower()
            target = self.log_dir / str(stage) / f"{kind}_{now:%Y-%m-%d}.log"
            target.parent.mkdir(parents=True, exist_ok=True)
            entry = f"[{now:%Y-%m-%d %H:%M:%S}] File: {document}\n{kind.capitalize()}: {record.getMessage()}\n\n"
            with target.open("a", encoding="utf-8") as handle:
                handle.write(entry)
        except Exception:
            self.handleError(record)


def configure_logging(*, log_dir: Path | None = None, level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    if log_dir is not None:
        root_logger.addHandler(StageFileHandler(log_dir))
    root_logger.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
