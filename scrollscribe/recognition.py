"""
Bounded worker pool that runs preprocessing + OCR for every chunk.
"""

import threading
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Deque, Dict, List, Optional, Sequence

from scrollscribe.config import OcrConfig
from scrollscribe.errors import OcrRecognitionError
from scrollscribe.extractors.base import BaseRecognizer
from scrollscribe.models import ChunkDescriptor, RawChunkResult, SourceImage
from scrollscribe.preprocessors import OpenCVPreprocessor


class RecognitionPool:
    """
    Recognize chunks concurrently, at most ``config.concurrency`` at a time.

    Each unit of work preprocesses one chunk and sends it to the recognizer.
    Recognizer failures are retried with linear backoff; preprocessing
    failures are not. Results come back in chunk index order no matter which
    worker finished first. The first unit that fails for good stops any
    further dispatch, in-flight units run to completion, and that first
    error is raised.
    """

    def __init__(
        self,
        recognizer: BaseRecognizer,
        preprocessor: Optional[OpenCVPreprocessor] = None,
        config: Optional[OcrConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or OcrConfig()
        self.recognizer = recognizer
        self.preprocessor = preprocessor or OpenCVPreprocessor(self.config)
        self._sleep = sleep

        self._status_lock = threading.Lock()
        self._in_flight = 0
        self._dispatched = 0
        self._completed = 0

    def recognize_all(
        self, source: SourceImage, descriptors: Sequence[ChunkDescriptor]
    ) -> List[RawChunkResult]:
        """
        OCR every chunk of ``source``.

        Safe to call from several threads at once: slots and the stop flag
        belong to the call, only the status counters are shared.

        Args:
            source: Decoded screenshot, shared read-only by all workers
            descriptors: Bands to recognize

        Returns:
            One RawChunkResult per descriptor, ascending by index

        Raises:
            ImagePreprocessingError: A chunk could not be prepared
            OcrRecognitionError: A chunk failed every OCR attempt
        """
        ordered = sorted(descriptors, key=lambda d: d.index)
        if not ordered:
            return []

        # One slot per chunk; each worker fills only its own
        results: List[Optional[RawChunkResult]] = [None] * len(ordered)
        slot_of = {d.index: position for position, d in enumerate(ordered)}
        pending: Deque[ChunkDescriptor] = deque(ordered)
        futures: Dict[Future, ChunkDescriptor] = {}
        failure: Optional[BaseException] = None

        slots = threading.BoundedSemaphore(self.config.concurrency)
        # Set by a worker before it gives its slot back after failing for good
        stop = threading.Event()

        print(
            f"[Pool] Recognizing {len(ordered)} chunk(s) with "
            f"{self.config.concurrency} worker(s) ({self.recognizer.name})"
        )

        with ThreadPoolExecutor(
            max_workers=self.config.concurrency, thread_name_prefix="scrollscribe-ocr"
        ) as executor:

            def dispatch() -> None:
                while pending and not stop.is_set() and slots.acquire(blocking=False):
                    # The freed slot may belong to a worker that just failed
                    if stop.is_set():
                        slots.release()
                        break
                    descriptor = pending.popleft()
                    with self._status_lock:
                        self._dispatched += 1
                    future = executor.submit(self._run_unit, source, descriptor, slots, stop)
                    futures[future] = descriptor

            dispatch()

            while futures:
                done, _ = wait(list(futures), return_when=FIRST_COMPLETED)
                for future in done:
                    descriptor = futures.pop(future)
                    try:
                        result = future.result()
                    except Exception as e:
                        if failure is None:
                            failure = e
                            print(f"[Pool] ✗ Chunk {descriptor.index} failed, no further chunks will start: {e}")
                        continue
                    results[slot_of[descriptor.index]] = result

                if failure is None:
                    dispatch()

        if failure is not None:
            raise failure

        # Join barrier: every slot must be filled before merging
        missing = [ordered[i].index for i, r in enumerate(results) if r is None]
        if missing:
            raise RuntimeError(f"Chunks finished without a result: {missing}")

        print(f"[Pool] ✓ Recognized {len(results)} chunk(s)")
        return results  # type: ignore[return-value]

    def _run_unit(
        self,
        source: SourceImage,
        descriptor: ChunkDescriptor,
        slots: threading.BoundedSemaphore,
        stop: threading.Event,
    ) -> RawChunkResult:
        """Worker body; always gives its slot back."""
        with self._status_lock:
            self._in_flight += 1
        try:
            return self._recognize_with_retry(source, descriptor)
        except Exception:
            stop.set()
            raise
        finally:
            with self._status_lock:
                self._in_flight -= 1
                self._completed += 1
            slots.release()

    def _recognize_with_retry(
        self, source: SourceImage, descriptor: ChunkDescriptor
    ) -> RawChunkResult:
        attempts = self.config.retries
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            # Regenerated on every attempt; ImagePreprocessingError escapes unretried
            buffer = self.preprocessor.preprocess(source, descriptor)

            try:
                text = self.recognizer.recognize(buffer)
            except Exception as e:
                last_error = e
                print(f"[Pool] Chunk {descriptor.index} attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    self._sleep(self.config.retry_base_delay_ms * attempt / 1000.0)
                continue

            return RawChunkResult(index=descriptor.index, text=text or "", attempts=attempt)

        raise OcrRecognitionError(
            descriptor.index, attempts, str(last_error) if last_error else ""
        ) from last_error

    def status(self) -> Dict[str, int]:
        """Snapshot of pool activity."""
        with self._status_lock:
            return {
                "concurrency": self.config.concurrency,
                "in_flight": self._in_flight,
                "dispatched": self._dispatched,
                "completed": self._completed,
            }
