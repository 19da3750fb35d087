"""
Tesseract recognizer via pytesseract.

Default engine: runs locally, handles Korean + English review screenshots
with the ``kor+eng`` language packs installed.
"""

import io
from typing import Optional

from PIL import Image

from scrollscribe.config import OcrConfig
from scrollscribe.errors import RecognizerUnavailableError
from scrollscribe.extractors.base import BaseRecognizer
from scrollscribe.models import PreprocessedBuffer


class TesseractRecognizer(BaseRecognizer):
    """
    OCR with the Tesseract binary.

    Uses from the config:
    - language: Tesseract language string (e.g. "kor+eng")
    - ocr_engine_mode: --oem value (1 = LSTM only)
    - page_segmentation_mode: --psm value (6 = single uniform block)
    """

    def __init__(self, config: Optional[OcrConfig] = None, extra_args: str = ""):
        super().__init__(config)
        try:
            import pytesseract
        except ImportError as e:
            raise RecognizerUnavailableError(
                "pytesseract not installed. Install with: pip install pytesseract"
            ) from e

        self._pytesseract = pytesseract
        self.extra_args = extra_args

        print(f"[Tesseract] lang={self.config.language} config={self.tesseract_config!r}")

    @property
    def tesseract_config(self) -> str:
        parts = [
            f"--oem {self.config.ocr_engine_mode}",
            f"--psm {self.config.page_segmentation_mode}",
        ]
        if self.extra_args:
            parts.append(self.extra_args)
        return " ".join(parts)

    def recognize(self, buffer: PreprocessedBuffer) -> str:
        with Image.open(io.BytesIO(buffer.data)) as image:
            return self._pytesseract.image_to_string(
                image, lang=self.config.language, config=self.tesseract_config
            )

    def version(self) -> str:
        """Installed Tesseract version; raises if the binary is missing."""
        try:
            return str(self._pytesseract.get_tesseract_version())
        except self._pytesseract.TesseractNotFoundError as e:
            raise RecognizerUnavailableError(f"Tesseract binary not found: {e}") from e
