"""
Stitch per-chunk transcripts into one document.

Consecutive chunks overlap by a band of pixels, so the last lines of one
chunk often reappear, slightly misread, at the top of the next. Those lines
are dropped by fuzzy comparison against the preceding chunk only.
"""

from typing import List, Sequence

from rapidfuzz.distance import Levenshtein

PARAGRAPH_BREAK = "\n\n"


def line_similarity_distance(a: str, b: str) -> float:
    """Levenshtein distance divided by the longer line's length (0.0 = equal)."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return Levenshtein.distance(a, b) / longest


def _lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def is_overlap_duplicate(
    line: str,
    previous_lines: Sequence[str],
    min_line_length: int = 6,
    similarity_threshold: float = 0.2,
) -> bool:
    """
    True when ``line`` repeats one of ``previous_lines``.

    Lines shorter than ``min_line_length`` are never treated as duplicates:
    "5.0" or "맛있어요" repeat legitimately across reviews.
    """
    if len(line) < min_line_length:
        return False
    return any(
        line_similarity_distance(line, previous) < similarity_threshold
        for previous in previous_lines
    )


def merge_chunks(
    chunks: Sequence[str],
    min_line_length: int = 6,
    similarity_threshold: float = 0.2,
) -> str:
    """
    Merge normalized chunk texts, top to bottom.

    Args:
        chunks: Normalized text per chunk, in chunk index order
        min_line_length: Shorter lines are always kept
        similarity_threshold: Normalized edit distance below which two
            lines count as the same line

    Returns:
        Merged transcript
    """
    if not chunks:
        return ""
    if len(chunks) == 1:
        return chunks[0]

    merged = chunks[0]
    previous_lines = _lines(chunks[0])

    for chunk in chunks[1:]:
        current_lines = _lines(chunk)
        survivors = [
            line
            for line in current_lines
            if not is_overlap_duplicate(
                line, previous_lines, min_line_length, similarity_threshold
            )
        ]

        if survivors:
            addition = "\n".join(survivors)
            merged = f"{merged}{PARAGRAPH_BREAK}{addition}" if merged else addition

        # Compare the next chunk against everything this chunk saw
        previous_lines = current_lines

    return merged
