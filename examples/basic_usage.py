"""
Basic usage example for ScrollScribe.

This example shows how to transcribe a tall review screenshot
using the Python API.
"""

from pathlib import Path
from scrollscribe import ScrollScribePipeline


def main():
    # Initialize pipeline with default settings (Tesseract, kor+eng)
    pipeline = ScrollScribePipeline()

    # Process the screenshot
    image_path = Path("examples/sample_reviews.png")
    output_path = Path("output/sample_reviews.txt")

    text = pipeline.transcribe(image_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n", encoding="utf-8")

    print("\n✓ Transcription complete!")
    print(f"  Transcript: {output_path}")
    print(f"  Characters: {len(text)}")


if __name__ == "__main__":
    main()
