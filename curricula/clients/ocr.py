from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("curricula.extract")

DEFAULT_OCR_DPI = 300
# Retry config for pages the default segmentation reads as empty.
FALLBACK_PAGE_SEGMENTATION = "--psm 3"


def resolve_tesseract_cmd(tesseract_cmd: str | Path | None = None) -> str | None:
    if tesseract_cmd:
        return str(tesseract_cmd)
    return shutil.which("tesseract")


@dataclass
class TesseractOCREngine:
    """Rasterises PDF pages with pdfplumber and reads them with tesseract."""

    tesseract_cmd: str | None = None
    dpi: int = DEFAULT_OCR_DPI

    def available(self) -> bool:
        command = resolve_tesseract_cmd(self.tesseract_cmd)
        if not command:
            return False
        try:
            import pytesseract

            pytesseract.pytesseract.tesseract_cmd = command
            pytesseract.get_tesseract_version()
        except Exception as exc:
            logger.warning(
                "OCR not available: %s",
                exc,
                extra={"stage": "extract", "document": "tesseract"},
            )
            return False
        return True

    def recognize(self, path: Path, *, language_hint: str) -> str:
        try:
            text = self._recognize_pages(path, language_hint=language_hint, config="")
            if not text.strip():
                text = self._recognize_pages(path, language_hint=language_hint, config=FALLBACK_PAGE_SEGMENTATION)
        except Exception as exc:
            logger.warning("OCR Error: %s", exc, extra={"stage": "extract", "document": path.name})
            return ""
        return text

    def _recognize_pages(self, path: Path, *, language_hint: str, config: str) -> str:
        import pdfplumber
        import pytesseract

        command = resolve_tesseract_cmd(self.tesseract_cmd)
        if command:
            pytesseract.pytesseract.tesseract_cmd = command

        parts: list[str] = []
        with pdfplumber.open(str(path)) as pdf:
            for page in pdf.pages:
                # PIL image; grayscale reads better on scanned CVs.
                image = page.to_image(resolution=self.dpi).original.convert("L")
                value = pytesseract.image_to_string(image, lang=language_hint, config=config).strip()
                if value:
                    parts.append(value)
        return "\n\n".join(parts)
