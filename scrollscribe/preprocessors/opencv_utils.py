"""
OpenCV-based chunk preprocessing for better OCR quality.
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Optional
from PIL import Image

from scrollscribe.config import OcrConfig
from scrollscribe.errors import ImagePreprocessingError
from scrollscribe.models import ChunkDescriptor, PreprocessedBuffer, SourceImage


class OpenCVPreprocessor:
    """
    Turn one band of a screenshot into a clean binary image for OCR.

    Stages, each applied to the previous stage's output:
    - Crop: cut the band out at full width
    - Resize: normalize width so OCR sees a consistent text scale
    - Grayscale
    - Contrast: linear transform to lift faint text
    - Sharpen: unsharp mask to undo resize blur
    - Threshold: binarize
    - Denoise: median filter to remove threshold speckle

    Stateless apart from its settings, so one instance is shared by all
    pool workers.
    """

    def __init__(self, config: Optional[OcrConfig] = None, save_dir: Optional[Path] = None):
        self.config = config or OcrConfig()
        self.save_dir = Path(save_dir) if save_dir else None

        if self.save_dir:
            self.save_dir.mkdir(parents=True, exist_ok=True)

    def preprocess(
        self, source: SourceImage, descriptor: ChunkDescriptor
    ) -> PreprocessedBuffer:
        """
        Apply every preprocessing stage to one chunk.

        Args:
            source: Decoded screenshot
            descriptor: Band to extract

        Returns:
            PNG-encoded binary image of the band

        Raises:
            ImagePreprocessingError: If any stage fails
        """
        try:
            region = self._extract_region(source, descriptor)
            result = self._resize(region)
            result = self._to_grayscale(result)
            result = self._adjust_contrast(result)
            result = self._sharpen(result)
            result = self._threshold(result)
            result = self._denoise(result)
            data = self._encode_png(result)
        except ImagePreprocessingError:
            raise
        except (cv2.error, ValueError, OSError) as e:
            raise ImagePreprocessingError(descriptor.index, str(e)) from e

        if self.save_dir:
            (self.save_dir / f"chunk_{descriptor.index}.png").write_bytes(data)

        height, width = result.shape[:2]
        return PreprocessedBuffer(
            index=descriptor.index, data=data, width=width, height=height
        )

    def _extract_region(
        self, source: SourceImage, descriptor: ChunkDescriptor
    ) -> Image.Image:
        """Crop rows [top, bottom) at full width."""
        if descriptor.bottom > source.height:
            raise ImagePreprocessingError(
                descriptor.index,
                f"band {descriptor.top}-{descriptor.bottom} exceeds image height {source.height}",
            )

        region = source.image.crop((0, descriptor.top, source.width, descriptor.bottom))
        if region.width == 0 or region.height == 0:
            raise ImagePreprocessingError(descriptor.index, "empty region")

        return region.convert("RGB")

    def _resize(self, region: Image.Image) -> np.ndarray:
        """
        Scale to the working width, keeping the aspect ratio.

        Pillow's Lanczos filter gives cleaner glyph edges than OpenCV's
        interpolators when upscaling small screenshots.
        """
        target_width = self.config.resize_width
        scale = target_width / region.width
        target_height = max(1, int(round(region.height * scale)))

        if (target_width, target_height) != region.size:
            region = region.resize(
                (target_width, target_height), Image.Resampling.LANCZOS
            )

        return self.pil_to_cv2(region)

    def _to_grayscale(self, image: np.ndarray) -> np.ndarray:
        if len(image.shape) == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        return image

    def _adjust_contrast(self, image: np.ndarray) -> np.ndarray:
        """
        Linear transform p' = p * multiplier + offset on a [0, 1] scale.
        """
        scaled = image.astype(np.float32) / 255.0
        scaled = scaled * self.config.contrast_multiplier + self.config.brightness_offset
        scaled = np.clip(scaled, 0.0, 1.0)
        return np.round(scaled * 255.0).astype(np.uint8)

    def _sharpen(self, image: np.ndarray) -> np.ndarray:
        """
        Unsharp mask, one pass per configured amount.

        Each pass adds back ``amount`` times the difference between the
        image and its Gaussian blur.
        """
        result = image
        for amount in self.config.sharpen_amounts:
            if amount == 0:
                continue
            blurred = cv2.GaussianBlur(result, (0, 0), self.config.sharpen_sigma)
            result = cv2.addWeighted(result, 1.0 + amount, blurred, -amount, 0)
        return result

    def _threshold(self, image: np.ndarray) -> np.ndarray:
        _, binary = cv2.threshold(
            image, self.config.threshold_value, 255, cv2.THRESH_BINARY
        )
        return binary

    def _denoise(self, image: np.ndarray) -> np.ndarray:
        """
        Median filter to drop isolated specks left by thresholding.
        """
        radius = self.config.median_radius
        if radius <= 0:
            return image
        return cv2.medianBlur(image, 2 * radius + 1)

    def _encode_png(self, image: np.ndarray) -> bytes:
        # PNG keeps the binarized edges intact; JPEG would blur them again
        ok, encoded = cv2.imencode(".png", image)
        if not ok:
            raise ValueError("PNG encoding failed")
        return encoded.tobytes()

    @staticmethod
    def pil_to_cv2(pil_image: Image.Image) -> np.ndarray:
        """Convert PIL Image to OpenCV format (numpy array)."""
        return cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)
