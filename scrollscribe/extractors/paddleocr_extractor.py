"""
PaddleOCR recognizer using the PaddleOCR 3.x text pipeline.

Optional backend: install with ``pip install 'scrollscribe[paddle]'``.
"""

import threading
from typing import List, Optional, Tuple

import cv2
import numpy as np

from scrollscribe.config import OcrConfig
from scrollscribe.errors import RecognizerUnavailableError
from scrollscribe.extractors.base import BaseRecognizer
from scrollscribe.models import PreprocessedBuffer

# Tesseract language codes -> PaddleOCR language names
PADDLE_LANGS = {
    "kor": "korean",
    "eng": "en",
    "jpn": "japan",
    "chi_sim": "ch",
    "chi_tra": "chinese_cht",
}


class PaddleOCRRecognizer(BaseRecognizer):
    """
    OCR with PaddleOCR's detection + recognition pipeline.

    PaddleOCR returns one entry per detected text box; boxes are regrouped
    into lines top to bottom so the output reads like Tesseract's.

    Note: Requires paddleocr>=3.0.0 and paddlepaddle>=3.0.0
    """

    def __init__(self, config: Optional[OcrConfig] = None, use_gpu: bool = False):
        super().__init__(config)
        try:
            from paddleocr import PaddleOCR
        except ImportError as e:
            raise RecognizerUnavailableError(
                "PaddleOCR 3.x not installed. Install with: pip install 'paddleocr>=3.0.0' 'paddlepaddle>=3.0.0'"
            ) from e

        lang = self._paddle_lang(self.config.language)
        init_kwargs = {
            "lang": lang,
            "use_doc_orientation_classify": False,  # Screenshots are upright
            "use_doc_unwarping": False,
            "use_textline_orientation": False,
            "device": "gpu:0" if use_gpu else "cpu",
        }

        print(f"[PaddleOCR] Initializing PaddleOCR with: {init_kwargs}")
        self.pipeline = PaddleOCR(**init_kwargs)
        # The Paddle predictor is not thread-safe
        self._lock = threading.Lock()

    @staticmethod
    def _paddle_lang(language: str) -> str:
        first = language.split("+")[0].strip()
        return PADDLE_LANGS.get(first, first)

    def recognize(self, buffer: PreprocessedBuffer) -> str:
        image = cv2.imdecode(np.frombuffer(buffer.data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError(f"Could not decode chunk {buffer.index}")

        with self._lock:
            results = list(self.pipeline.predict(input=image))

        boxes: List[Tuple[float, float, float, str]] = []
        for res in results:
            try:
                result_dict = res.json
            except AttributeError:
                result_dict = res if isinstance(res, dict) else {}

            # PaddleOCR 3.x nests results under 'res'
            inner = result_dict.get("res", result_dict)
            texts = inner.get("rec_texts", [])
            polys = inner.get("rec_polys", [])

            for text, poly in zip(texts, polys):
                if not text or not str(text).strip():
                    continue
                if hasattr(poly, "tolist"):
                    poly = poly.tolist()
                xs = [p[0] for p in poly]
                ys = [p[1] for p in poly]
                boxes.append((min(ys), max(ys), min(xs), str(text).strip()))

        return "\n".join(self._group_lines(boxes))

    @staticmethod
    def _group_lines(boxes: List[Tuple[float, float, float, str]]) -> List[str]:
        """
        Join boxes whose vertical centers sit within half a box height of
        the current line, then order each line left to right.
        """
        if not boxes:
            return []

        boxes = sorted(boxes, key=lambda b: (b[0] + b[1]) / 2)
        lines: List[List[Tuple[float, float, float, str]]] = [[boxes[0]]]

        for box in boxes[1:]:
            current = lines[-1]
            center = (box[0] + box[1]) / 2
            line_center = sum((b[0] + b[1]) / 2 for b in current) / len(current)
            line_height = max(b[1] - b[0] for b in current)
            if abs(center - line_center) <= line_height / 2:
                current.append(box)
            else:
                lines.append([box])

        return [" ".join(b[3] for b in sorted(line, key=lambda b: b[2])) for line in lines]
