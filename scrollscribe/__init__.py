"""
ScrollScribe: Turn tall review screenshots into one de-duplicated transcript.

Splits the screenshot into overlapping bands, runs OCR on the bands in
parallel, cleans each band's text and merges them without repeating the
lines captured twice in the overlaps.
"""

__version__ = "0.1.0"
__author__ = "ScrollScribe Team"

from scrollscribe.config import OcrConfig
from scrollscribe.models import ChunkDescriptor, RawChunkResult, TranscriptResult
from scrollscribe.pipeline import ScrollScribePipeline

__all__ = [
    "OcrConfig",
    "ChunkDescriptor",
    "RawChunkResult",
    "TranscriptResult",
    "ScrollScribePipeline",
]
