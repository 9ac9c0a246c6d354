"""Tests for the Tesseract engine with pytesseract stubbed out."""

import pytest
import pytesseract

from receiptscan.core.errors import OcrExtractionError
from receiptscan.extractors import TesseractEngine, configure_tesseract_cmd


def _word_rows(words):
    """Build an image_to_data dict from (block, par, line, text, conf) tuples."""
    data = {key: [] for key in ("level", "page_num", "block_num", "par_num", "line_num", "text", "conf")}

    # Page-level row, as tesseract emits it
    for key, value in zip(data, (1, 1, 0, 0, 0, "", -1)):
        data[key].append(value)

    for block, par, line, text, conf in words:
        data["level"].append(5)
        data["page_num"].append(1)
        data["block_num"].append(block)
        data["par_num"].append(par)
        data["line_num"].append(line)
        data["text"].append(text)
        data["conf"].append(conf)
    return data


SAMPLE_ROWS = _word_rows(
    [
        (1, 1, 1, "WALMART", 96.0),
        (2, 1, 1, "05/12/2024", 90.0),
        (2, 1, 2, "Total:", 88.0),
        (2, 1, 2, "$23.47", 82.0),
        (2, 1, 2, " ", -1),
    ]
)


class TestTesseractEngine:
    """Test cases for TesseractEngine."""

    def setup_method(self):
        """Setup test fixtures."""
        self.engine = TesseractEngine()

    def test_builds_text_and_counts(self, monkeypatch, receipt_png_bytes):
        calls = {}

        def fake_image_to_data(image, lang, config, output_type, timeout):
            calls.update(lang=lang, timeout=timeout, output_type=output_type)
            return SAMPLE_ROWS

        monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)

        result = self.engine.recognize(receipt_png_bytes, "eng")

        assert result.text == "WALMART\n\n05/12/2024\nTotal: $23.47"
        assert result.word_count == 4
        assert result.line_count == 3
        assert result.confidence == pytest.approx(89.0)
        assert result.engine == "tesseract"
        assert calls["lang"] == "eng"
        assert calls["output_type"] == pytesseract.Output.DICT

    def test_string_confidences_are_accepted(self, monkeypatch, receipt_png_bytes):
        rows = _word_rows([(1, 1, 1, "CAFE", "91.5")])
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **kw: rows)

        result = self.engine.recognize(receipt_png_bytes, "eng")

        assert result.confidence == pytest.approx(91.5)

    def test_blank_page(self, monkeypatch, receipt_png_bytes):
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **kw: _word_rows([]))

        result = self.engine.recognize(receipt_png_bytes, "eng")

        assert result.text == ""
        assert result.confidence == 0.0
        assert result.word_count == 0
        assert result.line_count == 0

    def test_reports_progress(self, monkeypatch, receipt_png_bytes):
        monkeypatch.setattr(pytesseract, "image_to_data", lambda *a, **kw: SAMPLE_ROWS)
        updates = []

        self.engine.recognize(receipt_png_bytes, "eng", progress=updates.append)

        assert [u.progress for u in updates] == [0.0, 1.0]
        assert all(u.status == "recognizing text" for u in updates)

    def test_timeout_is_passed_through(self, monkeypatch, receipt_png_bytes):
        seen = {}

        def fake_image_to_data(*args, **kwargs):
            seen["timeout"] = kwargs["timeout"]
            return SAMPLE_ROWS

        monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)

        TesseractEngine(timeout=30).recognize(receipt_png_bytes, "eng")

        assert seen["timeout"] == 30

    @pytest.mark.parametrize(
        "error",
        [
            pytesseract.TesseractError(1, "Failed loading language 'xxx'"),
            pytesseract.TesseractNotFoundError(),
            RuntimeError("Tesseract process timeout"),
        ],
    )
    def test_engine_errors_are_wrapped(self, monkeypatch, receipt_png_bytes, error):
        def failing(*args, **kwargs):
            raise error

        monkeypatch.setattr(pytesseract, "image_to_data", failing)

        with pytest.raises(OcrExtractionError) as exc_info:
            self.engine.recognize(receipt_png_bytes, "xxx")

        assert exc_info.value.stage == "extract"
        assert exc_info.value.cause is error

    def test_undecodable_input_is_an_ocr_error(self):
        with pytest.raises(OcrExtractionError):
            self.engine.recognize(b"garbage", "eng")

    def test_is_available_false_without_binary(self, monkeypatch):
        def missing():
            raise pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)

        assert self.engine.is_available() is False


class TestConfigureTesseractCmd:
    """Process-wide tesseract binary selection."""

    def test_engines_leave_the_command_alone(self, monkeypatch):
        monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "/opt/ocr/bin/tesseract")

        TesseractEngine(timeout=5)
        TesseractEngine()

        assert pytesseract.pytesseract.tesseract_cmd == "/opt/ocr/bin/tesseract"

    def test_sets_command(self, monkeypatch):
        monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")

        configure_tesseract_cmd("/usr/local/bin/tesseract")

        assert pytesseract.pytesseract.tesseract_cmd == "/usr/local/bin/tesseract"

    def test_none_keeps_default(self, monkeypatch):
        monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")

        configure_tesseract_cmd(None)

        assert pytesseract.pytesseract.tesseract_cmd == "tesseract"
