from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from curricula.domain.contracts import DocumentDecoder, OCREngine
from curricula.domain.errors import ExtractionFailed
from curricula.domain.models import Document, DocumentFormat

COMPONENT_ID = "domain.extract.document"
DEFAULT_OCR_LANGUAGE = "eng"

OCR_LANGUAGE_HINTS: dict[str, str] = {
    "pt-br": "por",
    "pt": "por",
    "portuguese": "por",
    "en": "eng",
    "en-us": "eng",
    "english": "eng",
}

OCR_FORMATS: frozenset[DocumentFormat] = frozenset({DocumentFormat.PDF})

logger = logging.getLogger("curricula.extract")


def ocr_language_hint(output_language: str) -> str:
    return OCR_LANGUAGE_HINTS.get(output_language.strip().lower(), DEFAULT_OCR_LANGUAGE)


@dataclass
class ExtractionStage:
    """Turns one source document into plain text.

    Primary extraction raises ExtractionFailed on decoder errors; the OCR
    fallback only ever returns text, empty on any failure. Choosing when to
    fall back is left to the caller.
    """

    decoders: Mapping[DocumentFormat, DocumentDecoder]
    ocr: OCREngine
    output_language: str
    _ocr_available: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        try:
            self._ocr_available = bool(self.ocr.available())
        except Exception as exc:
            logger.warning("OCR probe failed: %s", exc, extra={"stage": "extract", "document": "tesseract"})
            self._ocr_available = False

    @property
    def ocr_available(self) -> bool:
        return self._ocr_available

    @property
    def ocr_language(self) -> str:
        return ocr_language_hint(self.output_language)

    def extract(self, document: Document) -> str:
        decoder = self.decoders.get(document.format)
        if decoder is None:
            return ""
        try:
            text = decoder.decode(document.source_path)
        except ExtractionFailed:
            raise
        except (MemoryError, RecursionError) as exc:
            raise ExtractionFailed(
                document.document_id,
                f"resource limit exceeded while decoding {document.source_path.name}: {exc!r}",
            ) from exc
        except Exception as exc:
            raise ExtractionFailed(document.document_id, str(exc) or exc.__class__.__name__) from exc
        return text or ""

    def extract_with_ocr(self, document: Document) -> str:
        extra = {"stage": "extract", "document": document.source_path.name}
        if not self._ocr_available:
            logger.warning("OCR Error: OCR engine is not available", extra=extra)
            return ""
        if document.format not in OCR_FORMATS:
            logger.warning("OCR Error: OCR not implemented for format: %s", document.format, extra=extra)
            return ""
        try:
            text = self.ocr.recognize(document.source_path, language_hint=self.ocr_language)
        except Exception as exc:
            logger.warning("OCR Error: %s", exc, extra=extra)
            return ""
        return text or ""
