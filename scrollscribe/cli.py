"""
Command-line interface for ScrollScribe.
"""

import os
import contextlib
import sys
import json
import argparse
from pathlib import Path

from dotenv import load_dotenv

from scrollscribe import __version__
from scrollscribe.config import OcrConfig
from scrollscribe.extractors import ENGINES
from scrollscribe.pipeline import ScrollScribePipeline


def build_config(args: argparse.Namespace) -> OcrConfig:
    """Environment first, then command-line flags on top."""
    config = OcrConfig.from_env(os.environ)
    if args.gray_text:
        config = config.as_gray_text()
    return config.with_overrides(
        concurrency=args.concurrency,
        language=args.lang,
        allow_partial_coverage=True if args.allow_partial else None,
    )


def main() -> int:
    """Main CLI entry point."""
    load_dotenv()  # Load .env file if present

    parser = argparse.ArgumentParser(
        description="ScrollScribe: Transcribe tall review screenshots into de-duplicated text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage with Tesseract
  scrollscribe reviews.png

  # Several screenshots, one transcript
  scrollscribe page1.png page2.png --output reviews.txt

  # Faint gray review text
  scrollscribe reviews.png --gray-text

  # Inspect the binarized bands sent to OCR
  scrollscribe reviews.png --dump-chunks ./chunks

Environment Variables:
  OCR_MAX_CHUNK_HEIGHT   Tallest band sent to OCR (default 1024)
  OCR_THRESHOLD_VALUE    Binarization threshold (default 128)
  OCR_RESIZE_WIDTH       Working width in px (default 1024)
  OCR_DELAY_BASE         Retry backoff base in ms (default 1000)
  OCR_LANGUAGE           Tesseract languages (default kor+eng)
        """,
    )

    parser.add_argument(
        "images",
        nargs="*",
        type=Path,
        help="Screenshot image(s) to transcribe",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ScrollScribe {__version__}",
    )

    parser.add_argument(
        "--engine",
        choices=list(ENGINES),
        default="tesseract",
        help="OCR engine (default: tesseract)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write the transcript here instead of stdout",
    )

    parser.add_argument(
        "--gray-text",
        action="store_true",
        help="Raise the binarization threshold for faint gray text",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="Simultaneous OCR calls (default: 3)",
    )

    parser.add_argument(
        "--lang",
        help="OCR language string (default: kor+eng)",
    )

    parser.add_argument(
        "--allow-partial",
        action="store_true",
        help="Continue when the chunk limit stops short of the image bottom",
    )

    parser.add_argument(
        "--dump-chunks",
        type=Path,
        help="Save each preprocessed chunk as PNG in this directory",
    )

    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print tracebacks on failure",
    )

    args = parser.parse_args()

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    if args.show_config:
        print(json.dumps(config.describe(), indent=2, ensure_ascii=False))
        return 0

    # Validate input
    if not args.images:
        parser.print_help()
        return 1

    for image in args.images:
        if not image.exists():
            print(f"Error: Input file not found: {image}", file=sys.stderr)
            return 1

    try:
        # Progress goes to stderr so stdout carries only the transcript
        with contextlib.redirect_stdout(sys.stderr):
            pipeline = ScrollScribePipeline(
                config=config,
                engine=args.engine,
                dump_dir=args.dump_chunks,
            )
            text = pipeline.transcribe_many(args.images)

        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(text + "\n", encoding="utf-8")
            print(f"Transcript: {args.output}", file=sys.stderr)
        else:
            sys.stdout.write(text + "\n")

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
