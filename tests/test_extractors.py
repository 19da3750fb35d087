"""
Tests for OCR engine selection and the engine adapters.
"""

import io

import pytest
from PIL import Image

from scrollscribe.config import OcrConfig
from scrollscribe.extractors import ENGINES, TesseractRecognizer, build_recognizer
from scrollscribe.extractors.paddleocr_extractor import PaddleOCRRecognizer
from scrollscribe.models import PreprocessedBuffer


def _png_buffer():
    data = io.BytesIO()
    Image.new("L", (30, 10), 255).save(data, format="PNG")
    return PreprocessedBuffer(index=0, data=data.getvalue(), width=30, height=10)


def test_build_default_recognizer():
    """Test Tesseract is the default engine."""
    recognizer = build_recognizer()

    assert isinstance(recognizer, TesseractRecognizer)
    assert recognizer.name == "tesseract"
    assert "tesseract" in ENGINES


def test_unknown_engine():
    """Test unknown engine names are rejected."""
    with pytest.raises(ValueError):
        build_recognizer("not-an-engine")


def test_tesseract_config_string():
    """Test engine and segmentation modes come from the config."""
    recognizer = TesseractRecognizer(OcrConfig(page_segmentation_mode=4), extra_args="-c preserve_interword_spaces=1")

    assert recognizer.tesseract_config == "--oem 1 --psm 4 -c preserve_interword_spaces=1"


def test_tesseract_recognize(monkeypatch):
    """Test language and flags are passed through to pytesseract."""
    recognizer = TesseractRecognizer(OcrConfig(language="eng"))
    captured = {}

    def fake_image_to_string(image, lang=None, config=None):
        captured["size"] = image.size
        captured["lang"] = lang
        captured["config"] = config
        return "recognized\n"

    monkeypatch.setattr(recognizer._pytesseract, "image_to_string", fake_image_to_string)

    assert recognizer.recognize(_png_buffer()) == "recognized\n"
    assert captured == {"size": (30, 10), "lang": "eng", "config": "--oem 1 --psm 6"}


def test_paddle_language_mapping():
    """Test Tesseract language strings map to PaddleOCR names."""
    assert PaddleOCRRecognizer._paddle_lang("kor+eng") == "korean"
    assert PaddleOCRRecognizer._paddle_lang("eng") == "en"
    assert PaddleOCRRecognizer._paddle_lang("fr") == "fr"


def test_paddle_group_lines():
    """Test boxes are grouped into lines and ordered left to right."""
    boxes = [
        (52.0, 70.0, 10.0, "second"),
        (10.0, 30.0, 120.0, "world"),
        (12.0, 28.0, 10.0, "hello"),
        (50.0, 72.0, 90.0, "line"),
    ]

    assert PaddleOCRRecognizer._group_lines(boxes) == ["hello world", "second line"]
    assert PaddleOCRRecognizer._group_lines([]) == []
