"""
Preprocessing utilities for improving OCR quality.

Uses OpenCV for:
- Grayscale conversion
- Contrast/brightness adjustment
- Unsharp-mask sharpening
- Thresholding
- Median denoising
"""

from scrollscribe.preprocessors.opencv_utils import OpenCVPreprocessor

__all__ = ["OpenCVPreprocessor"]
