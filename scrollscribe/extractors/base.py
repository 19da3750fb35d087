"""
Base recognizer interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from scrollscribe.config import OcrConfig
from scrollscribe.models import PreprocessedBuffer


class BaseRecognizer(ABC):
    """Abstract base class for all OCR engines."""

    def __init__(self, config: Optional[OcrConfig] = None):
        self.config = config or OcrConfig()
        self.name = self.__class__.__name__.replace("Recognizer", "").lower()

    @abstractmethod
    def recognize(self, buffer: PreprocessedBuffer) -> str:
        """
        Run OCR on one preprocessed chunk.

        Called concurrently from pool worker threads, so implementations
        must not keep per-call state on ``self``.

        Args:
            buffer: PNG-encoded binary image of the chunk

        Returns:
            Raw recognized text, newline-delimited

        Raises:
            Exception: Any failure; the worker pool retries it
        """
        pass
