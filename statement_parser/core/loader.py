"""
Statement text acquisition: PDF text layer with pdfplumber, OCR fallback
for scanned PDFs, or plain text files.
"""
from pathlib import Path
from typing import List, Union
import logging

import pdfplumber

logger = logging.getLogger(__name__)

LIGATURES = {
    'ﬁ': 'fi',
    'ﬂ': 'fl',
    'ﬀ': 'ff',
    'ﬃ': 'ffi',
    'ﬄ': 'ffl',
    'ﬆ': 'st',
    'ﬅ': 'st',
}

OCR_DPI = 300
OCR_CONFIG = r'--oem 3 --psm 6'


class TextExtractionError(ValueError):
    """No text could be produced for a statement file."""


def _replace_ligatures(text: str) -> str:
    for ligature, replacement in LIGATURES.items():
        text = text.replace(ligature, replacement)
    return text


class PDFLoader:
    """Handles PDF loading and page text extraction."""

    def __init__(self, pdf_path: Path):
        self.pdf_path = pdf_path
        self._pdf = None
        self._pages: List[str] = []

    def load(self) -> List[str]:
        """Load the PDF and extract the text layer of every page."""
        if self._pages:
            return self._pages

        try:
            self._pdf = pdfplumber.open(self.pdf_path)
        except Exception as e:
            logger.error(f"Error loading PDF: {e}")
            raise TextExtractionError(f"Could not open PDF {self.pdf_path}: {e}") from e

        logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")
        for i, page in enumerate(self._pdf.pages, 1):
            text = _replace_ligatures(page.extract_text() or "")
            self._pages.append(text)
            logger.debug(f"Page {i}: {len(text)} characters extracted")

        return self._pages

    def text(self) -> str:
        return "\n".join(self.load())

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def ocr_pdf(pdf_path: Path, lang: str = "eng") -> str:
    """
    OCR every page of a scanned PDF.

    pdf2image and pytesseract are imported lazily; they need the poppler and
    tesseract binaries, which text-layer PDFs never touch.
    """
    from pdf2image import convert_from_path
    import pytesseract

    images = convert_from_path(str(pdf_path), dpi=OCR_DPI)
    logger.info(f"Converted {len(images)} pages, running OCR ({lang})")

    pages = []
    for i, image in enumerate(images, 1):
        logger.debug(f"OCR processing page {i}/{len(images)}")
        pages.append(pytesseract.image_to_string(image, lang=lang, config=OCR_CONFIG) or "")
    return "\n".join(pages)


def load_text(path: Union[str, Path], lang: str = "eng") -> str:
    """
    Produce statement text for a file.

    Args:
        path: ``.txt`` file (read as UTF-8) or PDF
        lang: Tesseract language used when OCR is needed

    Returns:
        Extracted text

    Raises:
        TextExtractionError: If the file is missing or no text could be produced
    """
    path = Path(path)
    if not path.exists():
        raise TextExtractionError(f"File not found: {path}")

    if path.suffix.lower() == ".txt":
        text = path.read_text(encoding="utf-8")
    else:
        with PDFLoader(path) as loader:
            text = loader.text()

        if not text.strip():
            logger.warning(f"No text layer in {path.name}, falling back to OCR")
            try:
                text = ocr_pdf(path, lang)
            except Exception as e:
                raise TextExtractionError(f"No text layer in {path.name} and OCR failed: {e}") from e

    if not text or not text.strip():
        raise TextExtractionError(f"No text could be extracted from {path.name}")

    logger.info(f"Extracted {len(text)} characters from {path.name}")
    return text

