"""
Tests for statement text acquisition.
"""
import pytest

from ..core import loader
from ..core.loader import TextExtractionError, load_text


class TestLoadText:

    def test_text_file(self, tmp_path):
        path = tmp_path / "statement.txt"
        path.write_text("HDFC Bank\nTotal Amount Due 1,000.00", encoding="utf-8")
        assert load_text(path) == "HDFC Bank\nTotal Amount Due 1,000.00"

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "statement.txt"
        path.write_text("text", encoding="utf-8")
        assert load_text(str(path)) == "text"

    def test_missing_file(self, tmp_path):
        with pytest.raises(TextExtractionError):
            load_text(tmp_path / "missing.pdf")

    def test_empty_text_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(TextExtractionError):
            load_text(path)

    def test_error_is_value_error(self):
        assert issubclass(TextExtractionError, ValueError)

    def test_unreadable_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"not a pdf")
        with pytest.raises(TextExtractionError):
            load_text(path)


class TestOcrFallback:
    """Scanned PDFs have no text layer and go through OCR."""

    @pytest.fixture
    def scanned(self, tmp_path, monkeypatch):
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF-1.4")
        monkeypatch.setattr(loader.PDFLoader, "text", lambda self: "")
        return path

    def test_ocr_text_used(self, scanned, monkeypatch):
        calls = []

        def fake_ocr(path, lang):
            calls.append(lang)
            return "AXIS BANK\nCard No: XXXX XXXX XXXX 4321"

        monkeypatch.setattr(loader, "ocr_pdf", fake_ocr)
        assert load_text(scanned, lang="eng+hin").startswith("AXIS BANK")
        assert calls == ["eng+hin"]

    def test_ocr_unavailable(self, scanned, monkeypatch):
        def no_ocr(path, lang):
            raise ImportError("No module named 'pytesseract'")

        monkeypatch.setattr(loader, "ocr_pdf", no_ocr)
        with pytest.raises(TextExtractionError):
            load_text(scanned)

    def test_ocr_returns_nothing(self, scanned, monkeypatch):
        monkeypatch.setattr(loader, "ocr_pdf", lambda path, lang: "")
        with pytest.raises(TextExtractionError):
            load_text(scanned)
