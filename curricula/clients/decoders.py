from __future__ import annotations

from pathlib import Path

from curricula.domain.contracts import DocumentDecoder
from curricula.domain.errors import DecodeFailure
from curricula.domain.models import DocumentFormat


class PdfPlumberDecoder:
    def decode(self, path: Path) -> str:
        try:
            import pdfplumber
        except ModuleNotFoundError as exc:
            raise DecodeFailure("pdfplumber is not installed") from exc

        pages: list[str] = []
        with pdfplumber.open(str(path)) as pdf:
            for page in pdf.pages:
                value = (page.extract_text() or "").strip()
                if value:
                    pages.append(value)
                # Release cached page objects; large CVs otherwise pile up.
                page.close()
        return "\n\n".join(pages)


class DocxDecoder:
    def decode(self, path: Path) -> str:
        try:
            from docx import Document
        except ModuleNotFoundError as exc:
            raise DecodeFailure("python-docx is not installed") from exc

        doc = Document(str(path))
        parts: list[str] = []
        for paragraph in doc.paragraphs:
            value = paragraph.text.strip()
            if value:
                parts.append(value)

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))

        return "\n".join(parts)


def build_default_decoders() -> dict[DocumentFormat, DocumentDecoder]:
    return {
        DocumentFormat.PDF: PdfPlumberDecoder(),
        DocumentFormat.DOCX: DocxDecoder(),
    }
