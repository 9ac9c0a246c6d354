"""Tests for the receipt pipeline."""

import asyncio
import io
import json
import threading
import time

import pytest
from PIL import Image

from receiptscan.core.errors import ImageProcessingError, OcrExtractionError
from receiptscan.core.models import OCRResult
from receiptscan.core.pipeline import ReceiptPipeline
from receiptscan.extractors import BaseOCREngine, MockOCREngine, TextExtractor
from receiptscan.parsing import ReceiptFieldParser
from receiptscan.preprocessing import ImageNormalizer


class FailingEngine(BaseOCREngine):
    name = "failing"

    def recognize(self, image, language, progress=None):
        raise OcrExtractionError("Tesseract crashed")


class LanguageKeyedEngine(BaseOCREngine):
    """Returns different text per language, slowly enough for calls to overlap."""

    name = "keyed"

    def __init__(self, texts):
        self.texts = texts

    def recognize(self, image, language, progress=None):
        time.sleep(0.05)
        text = self.texts[language]
        return OCRResult(text=text, confidence=90.0, word_count=len(text.split()), line_count=2, engine=self.name)


class WaitingNormalizer(ImageNormalizer):
    """Blocks until the event loop has run another task."""

    def __init__(self, loop_ran):
        super().__init__()
        self.loop_ran = loop_ran
        self.saw_loop_progress = None

    def normalize_file(self, path):
        self.saw_loop_progress = self.loop_ran.wait(timeout=2)
        return super().normalize_file(path)


class RecordingParser(ReceiptFieldParser):
    def __init__(self):
        super().__init__()
        self.texts = []

    def parse(self, text):
        self.texts.append(text)
        return super().parse(text)


class TestReceiptPipeline:
    """Test cases for ReceiptPipeline."""

    def test_end_to_end(self, walmart_pipeline, receipt_image_path):
        result = asyncio.run(walmart_pipeline.process(receipt_image_path))

        assert result.to_json() == {
            "amount": 23.47,
            "currency": "USD",
            "date": "05/12/2024",
            "merchant": "WALMART",
            "category": None,
            "confidence": 87.5,
            "rawText": "WALMART\n05/12/2024\nTotal: $23.47",
            "wordCount": 4,
            "lineCount": 3,
        }

    def test_engine_receives_normalized_image(self, walmart_pipeline, walmart_engine, receipt_image_path):
        asyncio.run(walmart_pipeline.process(receipt_image_path))

        image_bytes, language = walmart_engine.calls[0]
        with Image.open(io.BytesIO(image_bytes)) as img:
            assert img.format == "PNG"
            assert img.mode == "L"
        assert language == "eng"

    def test_process_bytes(self, walmart_pipeline, receipt_png_bytes):
        result = asyncio.run(walmart_pipeline.process_bytes(receipt_png_bytes, language="deu"))

        assert result.merchant == "WALMART"

    def test_result_is_json_serializable(self, walmart_pipeline, receipt_image_path):
        result = asyncio.run(walmart_pipeline.process(receipt_image_path))

        assert json.loads(json.dumps(result.to_json()))["rawText"].startswith("WALMART")

    def test_image_failure_stops_pipeline(self, tmp_path):
        engine = MockOCREngine(mock_text="unused")
        parser = RecordingParser()
        pipeline = ReceiptPipeline(extractor=TextExtractor(engine), parser=parser)
        bad = tmp_path / "broken.jpg"
        bad.write_bytes(b"\xff\xd8 not really a jpeg")

        with pytest.raises(ImageProcessingError) as exc_info:
            asyncio.run(pipeline.process(bad))

        assert exc_info.value.stage == "normalize"
        assert engine.calls == []
        assert parser.texts == []

    def test_ocr_failure_stops_pipeline(self, receipt_image_path):
        parser = RecordingParser()
        pipeline = ReceiptPipeline(extractor=TextExtractor(FailingEngine()), parser=parser)

        with pytest.raises(OcrExtractionError) as exc_info:
            asyncio.run(pipeline.process(receipt_image_path))

        assert exc_info.value.stage == "extract"
        assert parser.texts == []

    def test_progress_reaches_caller(self, walmart_pipeline, receipt_image_path):
        updates = []

        asyncio.run(walmart_pipeline.process(receipt_image_path, on_progress=updates.append))

        assert updates and updates[-1].progress == 1.0

    def test_concurrent_invocations_are_independent(self, receipt_png_bytes):
        pipeline = ReceiptPipeline(
            extractor=TextExtractor(
                LanguageKeyedEngine(
                    {
                        "eng": "ACME HARDWARE\nTotal: $10.00",
                        "deu": "Joe's Diner\nlunch 12,50 EUR",
                    }
                )
            )
        )

        async def run_all():
            return await asyncio.gather(
                pipeline.process_bytes(receipt_png_bytes, language="eng"),
                pipeline.process_bytes(receipt_png_bytes, language="deu"),
            )

        result_a, result_b = asyncio.run(run_all())

        assert (result_a.amount, result_a.currency, result_a.merchant) == (10.0, "USD", "ACME HARDWARE")
        assert (result_b.amount, result_b.currency, result_b.category) == (12.5, "EUR", "Meals")
        assert result_b.merchant == "Joe's Diner"

    def test_normalization_runs_off_the_event_loop(self, receipt_image_path):
        loop_ran = threading.Event()
        normalizer = WaitingNormalizer(loop_ran)
        pipeline = ReceiptPipeline(
            normalizer=normalizer,
            extractor=TextExtractor(MockOCREngine("WALMART")),
        )

        async def mark_loop_alive():
            await asyncio.sleep(0)
            loop_ran.set()

        async def run_both():
            return await asyncio.gather(pipeline.process(receipt_image_path), mark_loop_alive())

        result, _ = asyncio.run(run_both())

        assert normalizer.saw_loop_progress is True
        assert result.merchant == "WALMART"
