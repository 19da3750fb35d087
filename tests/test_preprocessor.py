"""
Tests for OpenCV chunk preprocessing.
"""

import cv2
import numpy as np
import pytest
from PIL import Image

from scrollscribe.config import OcrConfig
from scrollscribe.errors import ImagePreprocessingError
from scrollscribe.models import ChunkDescriptor, SourceImage
from scrollscribe.preprocessors import OpenCVPreprocessor


def _text_like_source(width=200, height=600, ink=0):
    """White page with dark horizontal bars standing in for lines of text."""
    pixels = np.full((height, width, 3), 255, dtype=np.uint8)
    for top in range(20, height - 20, 40):
        pixels[top:top + 12, 10:width - 10] = ink
    return SourceImage.from_pil(Image.fromarray(pixels))


def _decode(buffer):
    return cv2.imdecode(np.frombuffer(buffer.data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)


def test_output_is_binary_png():
    """Test the buffer is a PNG holding only black and white pixels."""
    preprocessor = OpenCVPreprocessor(OcrConfig(resize_width=400))
    buffer = preprocessor.preprocess(_text_like_source(), ChunkDescriptor(index=1, top=100, height=200))

    assert buffer.index == 1
    assert buffer.data.startswith(b"\x89PNG")

    decoded = _decode(buffer)
    assert decoded.ndim == 2
    assert set(np.unique(decoded).tolist()) <= {0, 255}
    # Dark bars survive binarization
    assert (decoded == 0).any()


def test_resized_to_working_width():
    """Test chunks are scaled to resize_width keeping the aspect ratio."""
    preprocessor = OpenCVPreprocessor(OcrConfig(resize_width=400))
    buffer = preprocessor.preprocess(_text_like_source(), ChunkDescriptor(index=0, top=0, height=300))

    assert buffer.width == 400
    assert buffer.height == 600
    assert _decode(buffer).shape == (600, 400)


def test_out_of_bounds_chunk():
    """Test a band past the bottom edge raises ImagePreprocessingError."""
    preprocessor = OpenCVPreprocessor(OcrConfig(resize_width=200))

    with pytest.raises(ImagePreprocessingError) as exc_info:
        preprocessor.preprocess(_text_like_source(), ChunkDescriptor(index=7, top=500, height=200))

    assert exc_info.value.index == 7
    assert exc_info.value.code == "ERR_PREPROCESS"


def test_contrast_transform():
    """Test p' = p * 1.8 - 0.3 on a [0, 1] scale, clipped."""
    preprocessor = OpenCVPreprocessor(OcrConfig())
    result = preprocessor._adjust_contrast(np.array([[0, 128, 255]], dtype=np.uint8))

    assert result.tolist() == [[0, 154, 255]]


def test_gray_text_preset_keeps_faint_text():
    """A faint gray block turns white by default but black with the gray preset."""
    source = SourceImage.from_pil(Image.new("RGB", (200, 200), (120, 120, 120)))
    descriptor = ChunkDescriptor(index=0, top=0, height=200)

    default = _decode(OpenCVPreprocessor(OcrConfig(resize_width=200)).preprocess(source, descriptor))
    gray = _decode(OpenCVPreprocessor(OcrConfig.gray_text(resize_width=200)).preprocess(source, descriptor))

    assert (default == 255).all()
    assert (gray == 0).all()


def test_save_dir(tmp_path):
    """Test preprocessed chunks are written when save_dir is set."""
    save_dir = tmp_path / "chunks"
    preprocessor = OpenCVPreprocessor(OcrConfig(resize_width=200), save_dir=save_dir)
    buffer = preprocessor.preprocess(_text_like_source(), ChunkDescriptor(index=3, top=0, height=100))

    saved = save_dir / "chunk_3.png"
    assert saved.exists()
    assert saved.read_bytes() == buffer.data
