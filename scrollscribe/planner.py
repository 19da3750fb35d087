"""
Chunk planning: split a tall image into overlapping horizontal bands.
"""

from typing import List, Sequence

from scrollscribe.config import OcrConfig
from scrollscribe.models import ChunkDescriptor


def plan_chunks(total_height: int, config: OcrConfig) -> List[ChunkDescriptor]:
    """
    Compute the bands to OCR for an image of ``total_height`` pixels.

    Bands are ``max_chunk_height`` tall and step down by
    ``max_chunk_height - overlap``. A tail shorter than ``min_last_chunk``
    is absorbed into the band above it instead of becoming its own band.
    Planning stops early once ``max_chunks`` bands exist; use
    ``plan_covers`` to detect that.

    Args:
        total_height: Image height in pixels
        config: Pipeline configuration

    Returns:
        Descriptors ordered top to bottom
    """
    if total_height <= 0:
        raise ValueError(f"total_height must be positive, got {total_height}")

    if total_height <= config.max_chunk_height:
        return [ChunkDescriptor(index=0, top=0, height=total_height)]

    descriptors: List[ChunkDescriptor] = []
    y = 0

    while y < total_height and len(descriptors) < config.max_chunks:
        chunk_height = min(config.max_chunk_height, total_height - y)
        remaining = total_height - (y + chunk_height)

        if 0 < remaining < config.min_last_chunk:
            chunk_height = total_height - y

        descriptors.append(
            ChunkDescriptor(index=len(descriptors), top=y, height=chunk_height)
        )

        if y + chunk_height >= total_height:
            break
        y = y + chunk_height - config.overlap

    return descriptors


def plan_covers(descriptors: Sequence[ChunkDescriptor], total_height: int) -> bool:
    """True when the bands cover [0, total_height) with no gaps."""
    if not descriptors or descriptors[0].top != 0:
        return False

    for previous, current in zip(descriptors, descriptors[1:]):
        if previous.bottom < current.top:
            return False

    return descriptors[-1].bottom == total_height
