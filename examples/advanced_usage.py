"""
Advanced usage examples for ScrollScribe.

Shows how to:
- Tune settings for faint gray text
- Use PaddleOCR instead of Tesseract
- Inspect the chunk plan and raw OCR output
- Merge several screenshots into one transcript
"""

from pathlib import Path
from scrollscribe import OcrConfig, ScrollScribePipeline
from scrollscribe.errors import PlanningSafetyLimitReached
from scrollscribe.extractors.paddleocr_extractor import PaddleOCRRecognizer


def example_gray_text():
    """Raise the binarization threshold for light gray review text."""
    print("\n[Example 1] Gray text preset")

    config = OcrConfig.gray_text(concurrency=4)
    pipeline = ScrollScribePipeline(
        config=config,
        dump_dir=Path("output/gray_chunks"),  # Inspect what OCR sees
    )

    text = pipeline.transcribe(Path("examples/gray_reviews.png"))
    print(text)


def example_with_paddleocr():
    """Use PaddleOCR (requires the paddle extra)."""
    print("\n[Example 2] Using PaddleOCR")

    config = OcrConfig(language="kor", concurrency=2)
    recognizer = PaddleOCRRecognizer(config, use_gpu=False)
    pipeline = ScrollScribePipeline(config=config, recognizer=recognizer)

    text = pipeline.transcribe(Path("examples/sample_reviews.png"))
    print(text)


def example_inspect_result():
    """Look at the plan and per-chunk OCR text behind a transcript."""
    print("\n[Example 3] Detailed result")

    pipeline = ScrollScribePipeline(config=OcrConfig(max_chunks=20))

    def on_progress(percent, phase):
        print(f"  {percent:5.1f}% {phase}")

    try:
        result = pipeline.transcribe_detailed(
            Path("examples/very_tall_reviews.png"), progress_callback=on_progress
        )
    except PlanningSafetyLimitReached as e:
        print(f"✗ {e}")
        print("  Retry with OcrConfig(allow_partial_coverage=True) to keep what was planned")
        return

    for descriptor, raw in zip(result.descriptors, result.raw_results):
        print(f"Chunk {descriptor.index}: rows {descriptor.top}-{descriptor.bottom}, {raw.attempts} attempt(s)")
        print(f"  {raw.text[:60]!r}")

    print(f"✓ {result.chunk_count} chunk(s) in {result.elapsed_seconds:.1f}s")


def example_many_screenshots():
    """Join several screenshots of one review page, top to bottom."""
    print("\n[Example 4] Several screenshots")

    pipeline = ScrollScribePipeline()
    images = sorted(Path("examples/pages").glob("*.png"))

    text = pipeline.transcribe_many(images)
    output_path = Path("output/pages.txt")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n", encoding="utf-8")
    print(f"✓ {len(images)} screenshot(s) transcribed")


if __name__ == "__main__":
    # Run the examples you want
    example_gray_text()
    # example_with_paddleocr()
    # example_inspect_result()
    # example_many_screenshots()
