"""
Main orchestration pipeline for ScrollScribe.

Coordinates chunk planning, parallel OCR, normalization and merging.
"""

import io
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from scrollscribe.config import OcrConfig
from scrollscribe.errors import ImageLoadError, ImageTooSmallError, PlanningSafetyLimitReached
from scrollscribe.extractors import BaseRecognizer, build_recognizer
from scrollscribe.merge import merge_chunks
from scrollscribe.models import SourceImage, TranscriptResult
from scrollscribe.normalizer import normalize
from scrollscribe.planner import plan_chunks, plan_covers
from scrollscribe.preprocessors import OpenCVPreprocessor
from scrollscribe.recognition import RecognitionPool

ImageInput = Union[str, Path, bytes, Image.Image]


def load_source_image(image: ImageInput) -> SourceImage:
    """
    Decode a path, raw bytes or PIL image into a SourceImage.

    EXIF orientation is applied and the result is fully loaded as RGB, so
    worker threads only ever read from it.
    """
    try:
        if isinstance(image, Image.Image):
            decoded = image
        elif isinstance(image, (bytes, bytearray)):
            decoded = Image.open(io.BytesIO(image))
        else:
            path = Path(image)
            if not path.exists():
                raise ImageLoadError(f"Image not found: {path}")
            decoded = Image.open(path)

        decoded = ImageOps.exif_transpose(decoded)
        decoded = decoded.convert("RGB")
    except ImageLoadError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageLoadError(f"Could not decode image: {e}") from e

    return SourceImage.from_pil(decoded)


class ScrollScribePipeline:
    """
    End-to-end pipeline turning a tall screenshot into one transcript.

    Pipeline stages:
    1. Planning: split the image into overlapping horizontal bands
    2. Recognition: preprocess + OCR every band on a bounded worker pool
    3. Normalization: strip emoji, UI chrome and noise lines per band
    4. Merge: join bands, dropping lines repeated by the overlap
    """

    def __init__(
        self,
        config: Optional[OcrConfig] = None,
        recognizer: Optional[BaseRecognizer] = None,
        engine: str = "tesseract",
        dump_dir: Optional[Path] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Settings shared by every stage (defaults if omitted)
            recognizer: OCR engine instance; built from ``engine`` if omitted
            engine: "tesseract" or "paddleocr"
            dump_dir: Save each preprocessed band here for inspection
        """
        self.config = config or OcrConfig()
        self.recognizer = recognizer or build_recognizer(engine, self.config)
        self.preprocessor = OpenCVPreprocessor(self.config, save_dir=dump_dir)
        self.pool = RecognitionPool(self.recognizer, self.preprocessor, self.config)

    def transcribe(self, image: ImageInput) -> str:
        """Transcribe one screenshot and return the merged text."""
        return self.transcribe_detailed(image).text

    def transcribe_many(
        self,
        images: Sequence[ImageInput],
        progress_callback: Optional[Callable[[float, str], None]] = None,
    ) -> str:
        """
        Transcribe several screenshots and join their transcripts in order.

        Fails on the first image that fails; nothing partial is returned.
        """
        texts: List[str] = []
        for i, image in enumerate(images):
            print(f"[Pipeline] Image {i + 1}/{len(images)}")
            if progress_callback:
                progress_callback(100.0 * i / len(images), f"Image {i + 1}/{len(images)}")
            texts.append(self.transcribe(image))

        if progress_callback:
            progress_callback(100.0, "Completed")
        return "\n".join(texts)

    def transcribe_detailed(
        self,
        image: ImageInput,
        progress_callback: Optional[Callable[[float, str], None]] = None,
    ) -> TranscriptResult:
        """
        Run the full pipeline on one screenshot.

        Args:
            image: Path, encoded bytes or PIL image
            progress_callback: Called with (percent, phase) between stages

        Returns:
            TranscriptResult with the text, the plan and raw OCR output

        Raises:
            ImageLoadError: Input could not be decoded
            ImageTooSmallError: Image shorter than ``min_image_height``
            PlanningSafetyLimitReached: Chunk cap hit and partial coverage not allowed
            ImagePreprocessingError: A band could not be prepared
            OcrRecognitionError: A band failed every OCR attempt
        """
        started = time.perf_counter()
        source = load_source_image(image)

        print(f"\n{'='*60}")
        print(f"ScrollScribe Pipeline")
        print(f"{'='*60}")
        print(f"Image: {source.width}x{source.height}px")
        print(f"Engine: {self.recognizer.name}")
        print(f"Concurrency: {self.config.concurrency}")
        print(f"{'='*60}\n")

        if source.height < self.config.min_image_height:
            raise ImageTooSmallError(source.height, self.config.min_image_height)

        # Stage 1: Plan chunks
        if progress_callback:
            progress_callback(5.0, "Planning chunks")
        descriptors = plan_chunks(source.height, self.config)
        complete = plan_covers(descriptors, source.height)
        print(f"[Stage 1/4] Planned {len(descriptors)} chunk(s)")

        if not complete:
            limit = PlanningSafetyLimitReached(descriptors, source.height, self.config.max_chunks)
            if not self.config.allow_partial_coverage:
                raise limit
            print(f"[Stage 1/4] Warning: {limit.message}; continuing with partial coverage")

        # Stage 2: Recognize
        if progress_callback:
            progress_callback(10.0, f"Recognizing {len(descriptors)} chunk(s)")
        print(f"\n[Stage 2/4] Recognition")
        raw_results = self.pool.recognize_all(source, descriptors)

        # Stage 3: Normalize
        if progress_callback:
            progress_callback(80.0, "Normalizing text")
        print(f"\n[Stage 3/4] Normalizing {len(raw_results)} chunk(s)")
        normalized = [normalize(result.text) for result in raw_results]

        # Stage 4: Merge
        if progress_callback:
            progress_callback(90.0, "Merging chunks")
        print(f"\n[Stage 4/4] Merging")
        text = merge_chunks(
            normalized,
            min_line_length=self.config.min_line_length,
            similarity_threshold=self.config.similarity_threshold,
        )

        elapsed = time.perf_counter() - started
        if progress_callback:
            progress_callback(100.0, "Completed")

        print(f"\n{'='*60}")
        print(f"✓ Pipeline Complete ({elapsed:.1f}s)")
        print(f"{'='*60}")
        print(f"Chunks: {len(descriptors)}")
        print(f"Characters: {len(text)}")
        print(f"{'='*60}\n")

        return TranscriptResult(
            text=text,
            descriptors=descriptors,
            raw_results=raw_results,
            complete_coverage=complete,
            source_width=source.width,
            source_height=source.height,
            elapsed_seconds=elapsed,
        )
