"""Text acquisition collaborators for the extraction pipeline.

The pipeline only depends on the :class:`TextSource` capability: a text layer
and an OCR rendering limited to the first ``page_limit`` pages. Two
implementations are provided:

- :class:`PdfTextSource`: ``pdfplumber`` for the embedded text layer; PyMuPDF
  rasterization plus ``pytesseract`` for OCR.
- :class:`StaticTextSource`: already-extracted text (plain-text inputs, tests).

Engine and I/O failures surface as :class:`TextSourceError`.
"""

from __future__ import annotations

import io
import os
from collections.abc import Callable
from os import PathLike
from pathlib import Path
from typing import Protocol, TypeAlias, runtime_checkable

from .logging_setup import get_logger

OCR_PAGE_LIMIT = 5
# Rasterization scale for OCR (2x the PDF's 72 dpi user space).
OCR_SCALE = 2.0
_OCR_LANG_ENV = "STATEMENT_EXTRACTION_OCR_LANG"
_DEFAULT_OCR_LANG = "por+eng"

PageCallback: TypeAlias = Callable[[int, int], None]
"""``(pages_done, pages_total)`` reported after each page."""

_logger = get_logger("statement_extraction.text_sources")


class TextSourceError(RuntimeError):
    """Raised when a text layer or OCR pass cannot be produced."""


@runtime_checkable
class TextSource(Protocol):
    def layer_text(self, on_page: PageCallback | None = None) -> str: ...

    def ocr_text(
        self, page_limit: int = OCR_PAGE_LIMIT, on_page: PageCallback | None = None
    ) -> str: ...


class StaticTextSource:
    """A source over text that has already been extracted."""

    def __init__(self, layer: str, ocr: str = "") -> None:
        self._layer = layer
        self._ocr = ocr

    def layer_text(self, on_page: PageCallback | None = None) -> str:
        if on_page is not None:
            on_page(1, 1)
        return self._layer

    def ocr_text(
        self, page_limit: int = OCR_PAGE_LIMIT, on_page: PageCallback | None = None
    ) -> str:
        if on_page is not None:
            on_page(1, 1)
        return self._ocr

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> StaticTextSource:
        p = Path(path)
        try:
            return cls(p.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise TextSourceError(f"failed to read text file {p}: {e}") from e


class PdfTextSource:
    """Text layer and OCR for a PDF on disk."""

    def __init__(self, path: str | PathLike[str], *, ocr_lang: str | None = None) -> None:
        self.path = Path(path)
        env_lang = os.getenv(_OCR_LANG_ENV)
        self.ocr_lang = ocr_lang or (env_lang.strip() if env_lang else "") or _DEFAULT_OCR_LANG

    def layer_text(self, on_page: PageCallback | None = None) -> str:
        """Return the embedded text of every page joined by newlines."""

        import pdfplumber

        chunks: list[str] = []
        try:
            with pdfplumber.open(self.path) as pdf:
                total = len(pdf.pages)
                for n, page in enumerate(pdf.pages, start=1):
                    chunks.append(page.extract_text() or "")
                    if on_page is not None:
                        on_page(n, total)
        except Exception as e:  # noqa: BLE001 - pdfminer raises a wide range of types
            raise TextSourceError(f"text layer extraction failed for {self.path}: {e}") from e
        return "\n".join(chunks)

    def ocr_text(
        self, page_limit: int = OCR_PAGE_LIMIT, on_page: PageCallback | None = None
    ) -> str:
        """OCR the first ``page_limit`` pages sequentially.

        Each page raster is released right after recognition; the document is
        closed even when recognition fails.
        """

        import fitz
        import pytesseract
        from PIL import Image

        try:
            doc = fitz.open(str(self.path))
        except Exception as e:  # noqa: BLE001
            raise TextSourceError(f"failed to open {self.path} for OCR: {e}") from e

        chunks: list[str] = []
        try:
            total = min(doc.page_count, max(0, page_limit))
            for idx in range(total):
                page = doc.load_page(idx)
                pix = page.get_pixmap(matrix=fitz.Matrix(OCR_SCALE, OCR_SCALE), alpha=False)
                img = Image.open(io.BytesIO(pix.tobytes("png")))
                try:
                    chunks.append(pytesseract.image_to_string(img, lang=self.ocr_lang))
                finally:
                    img.close()
                    del pix
                _logger.debug("ocr:page_done page=%d total=%d", idx + 1, total)
                if on_page is not None:
                    on_page(idx + 1, total)
        except Exception as e:  # noqa: BLE001 - tesseract/PyMuPDF errors vary by platform
            raise TextSourceError(f"OCR failed for {self.path}: {e}") from e
        finally:
            doc.close()
        return "\n".join(chunks)


__all__ = [
    "OCR_PAGE_LIMIT",
    "PdfTextSource",
    "StaticTextSource",
    "TextSource",
    "TextSourceError",
]
