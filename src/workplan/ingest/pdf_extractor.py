# src/workplan/ingest/pdf_extractor.py

from __future__ import annotations

import io
import logging
from pathlib import Path

import pdfplumber

from ..core.errors import ExtractionError

logger = logging.getLogger(__name__)


class PdfTextExtractor:
    """Extracts the text layer of a PDF with pdfplumber (blocking)."""

    def extract(self, document: bytes) -> str:
        """
        Extracts text from PDF bytes.
        :param document: Raw PDF bytes.
        :return: Page texts joined by blank lines.
        """
        if not document:
            raise ExtractionError("The document is empty.")

        pages: list[str] = []
        try:
            with pdfplumber.open(io.BytesIO(document)) as pdf:
                for page in pdf.pages:
                    text = page.extract_text()
                    if text:
                        pages.append(text.strip())
        except Exception as e:
            logger.exception("PDF parsing failed (bytes=%d)", len(document))
            raise ExtractionError(f"Could not read the PDF document: {e}") from e

        text = "\n\n".join(pages).strip()
        if not text:
            raise ExtractionError("The PDF has no extractable text (is it a scanned image?).")

        logger.info("Extracted PDF text pages=%d chars=%d", len(pages), len(text))
        return text

    def extract_path(self, path: str | Path) -> str:
        """
        Extracts text from a local PDF file.
        :param path: A local file path to a PDF file.
        """
        p = Path(path)
        if not p.is_file():
            raise ExtractionError(f"File not found: {p}")
        if p.suffix.lower() != ".pdf":
            raise ExtractionError("Please select a valid PDF file.")
        return self.extract(p.read_bytes())
