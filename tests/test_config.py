"""
Tests for OcrConfig defaults, validation and environment loading.
"""

import pytest

from scrollscribe.config import GRAY_TEXT_THRESHOLD_OFFSET, OcrConfig


def test_defaults():
    """Test default settings."""
    config = OcrConfig()

    assert config.max_chunk_height == 1024
    assert config.overlap == 200
    assert config.min_last_chunk == 512
    assert config.max_chunks == 100
    assert config.concurrency == 3
    assert config.retries == 3
    assert config.retry_base_delay_ms == 1000
    assert config.resize_width == 1024
    assert config.threshold_value == 128
    assert config.sharpen_amounts == (1.5, 1.0)
    assert config.min_line_length == 6
    assert config.similarity_threshold == 0.2
    assert config.language == "kor+eng"
    assert config.allow_partial_coverage is False


def test_invalid_values_rejected():
    """Out-of-range values fail validation."""
    with pytest.raises(ValueError):
        OcrConfig(concurrency=0)

    with pytest.raises(ValueError):
        OcrConfig(threshold_value=256)

    with pytest.raises(ValueError):
        OcrConfig(sharpen_amounts=(1.0, -0.5))

    with pytest.raises(ValueError):
        OcrConfig(unknown_setting=1)


def test_chunk_geometry_validation():
    """Overlap and tail size must fit inside a chunk."""
    with pytest.raises(ValueError):
        OcrConfig(max_chunk_height=500, overlap=500)

    with pytest.raises(ValueError):
        OcrConfig(max_chunk_height=500, overlap=100, min_last_chunk=600)


def test_config_is_immutable():
    """A config is shared by all workers and never changes mid-run."""
    config = OcrConfig()
    with pytest.raises(ValueError):
        config.concurrency = 10


def test_gray_text_preset():
    """Gray text preset raises only the threshold."""
    config = OcrConfig.gray_text()

    assert config.threshold_value == 128 + GRAY_TEXT_THRESHOLD_OFFSET
    assert config.max_chunk_height == OcrConfig().max_chunk_height

    assert OcrConfig.gray_text(concurrency=5).concurrency == 5
    assert OcrConfig(threshold_value=250).as_gray_text().threshold_value == 255


def test_from_env():
    """Test loading from OCR_* variables."""
    environ = {
        "OCR_THRESHOLD_VALUE": "140",
        "OCR_RESIZE_WIDTH": "800",
        "OCR_MAX_CHUNK_HEIGHT": "900",
        "OCR_DELAY_BASE": "250",
        "OCR_SHARPEN_AMOUNTS": "2.0, 0.5",
        "OCR_LANGUAGE": "eng",
        "OCR_CONCURRENCY": "  ",
        "UNRELATED": "ignored",
    }
    config = OcrConfig.from_env(environ)

    assert config.threshold_value == 140
    assert config.resize_width == 800
    assert config.max_chunk_height == 900
    assert config.retry_base_delay_ms == 250
    assert config.sharpen_amounts == (2.0, 0.5)
    assert config.language == "eng"
    # Blank values fall back to defaults
    assert config.concurrency == 3


def test_from_env_overrides_and_errors():
    """Explicit overrides win; bad values are reported."""
    config = OcrConfig.from_env({"OCR_CONCURRENCY": "2"}, concurrency=6)
    assert config.concurrency == 6

    with pytest.raises(ValueError):
        OcrConfig.from_env({"OCR_RESIZE_WIDTH": "wide"})


def test_describe():
    """Test describe() returns JSON-friendly values."""
    described = OcrConfig().describe()

    assert described["max_chunk_height"] == 1024
    assert described["sharpen_amounts"] == [1.5, 1.0]
    assert described["language"] == "kor+eng"


def test_with_overrides():
    """None means keep the current value."""
    config = OcrConfig(concurrency=2)

    assert config.with_overrides(concurrency=None, language=None) is config

    updated = config.with_overrides(concurrency=4, language="eng")
    assert updated.concurrency == 4
    assert updated.language == "eng"
    assert config.concurrency == 2

    with pytest.raises(ValueError):
        config.with_overrides(overlap=5000)
