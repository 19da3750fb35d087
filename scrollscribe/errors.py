"""
Error types raised by the ScrollScribe pipeline.

Every error carries a short machine readable ``code`` so callers (an HTTP
layer, a job runner) can map failures without string matching.
"""

from typing import List, Optional


class ScrollScribeError(Exception):
    """Base class for all pipeline errors."""

    code = "ERR_SCROLLSCRIBE"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ImageLoadError(ScrollScribeError):
    """The input could not be opened or decoded as an image."""

    code = "ERR_IMAGE_LOAD"


class ImageTooSmallError(ScrollScribeError):
    """Image height is below the minimum worth running OCR on."""

    code = "ERR_IMAGE_TOO_SMALL"

    def __init__(self, height: int, min_height: int):
        super().__init__(
            f"Image too small: height {height}px is below the minimum of {min_height}px"
        )
        self.height = height
        self.min_height = min_height


class ImagePreprocessingError(ScrollScribeError):
    """
    Deterministic failure while preparing one chunk for OCR.

    Never retried: the same region would fail the same way again.
    """

    code = "ERR_PREPROCESS"

    def __init__(self, index: int, reason: str):
        super().__init__(f"Preprocessing failed for chunk {index}: {reason}")
        self.index = index
        self.reason = reason


class OcrRecognitionError(ScrollScribeError):
    """The OCR engine kept failing on a chunk after all retry attempts."""

    code = "ERR_OCR_FAIL"

    def __init__(self, index: int, attempts: int, reason: str = ""):
        message = f"OCR failed for chunk {index} after {attempts} attempt(s)"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.index = index
        self.attempts = attempts


class PlanningSafetyLimitReached(ScrollScribeError):
    """
    The chunk planner hit ``max_chunks`` before reaching the bottom edge.

    ``descriptors`` holds the partial plan so a caller can decide whether
    partial coverage is acceptable.
    """

    code = "ERR_PLAN_LIMIT"

    def __init__(self, descriptors: List, total_height: int, max_chunks: int):
        covered = descriptors[-1].bottom if descriptors else 0
        super().__init__(
            f"Chunk limit of {max_chunks} reached: planned {covered}px "
            f"of {total_height}px"
        )
        self.descriptors = list(descriptors)
        self.total_height = total_height
        self.max_chunks = max_chunks


class RecognizerUnavailableError(ScrollScribeError):
    """The requested OCR backend is not installed or failed to initialize."""

    code = "ERR_OCR_INIT"


__all__ = [
    "ScrollScribeError",
    "ImageLoadError",
    "ImageTooSmallError",
    "ImagePreprocessingError",
    "OcrRecognitionError",
    "PlanningSafetyLimitReached",
    "RecognizerUnavailableError",
]
