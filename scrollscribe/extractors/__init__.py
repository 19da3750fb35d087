"""
OCR engines for recognizing preprocessed chunks.

Supports multiple backends:
- Tesseract (default, via pytesseract)
- PaddleOCR (optional)
"""

from typing import Optional

from scrollscribe.config import OcrConfig
from scrollscribe.extractors.base import BaseRecognizer
from scrollscribe.extractors.tesseract import TesseractRecognizer

ENGINES = ("tesseract", "paddleocr")


def build_recognizer(name: str = "tesseract", config: Optional[OcrConfig] = None) -> BaseRecognizer:
    """Create the recognizer called ``name``."""
    if name == "tesseract":
        return TesseractRecognizer(config)
    elif name == "paddleocr":
        # Imported lazily: paddle is heavy and optional
        from scrollscribe.extractors.paddleocr_extractor import PaddleOCRRecognizer

        return PaddleOCRRecognizer(config)
    else:
        raise ValueError(f"Unknown OCR engine: {name}")


__all__ = ["BaseRecognizer", "TesseractRecognizer", "build_recognizer", "ENGINES"]
