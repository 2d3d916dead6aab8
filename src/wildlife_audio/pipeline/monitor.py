"""Periodic capture -> recognize loop with at most one cycle in flight.

Monitoring holds one capture session from start() to stop(). Every
``interval_sec`` a timer fires a cycle that records ``record_duration_sec`` of
audio and runs it through the recognizer. A cycle that fires while the
previous one is still running is skipped.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from wildlife_audio.audio.signal import AudioSignal
from wildlife_audio.errors import AudioPipelineError, InvalidParametersError
from wildlife_audio.models.classifier import Prediction
from wildlife_audio.pipeline.recognizer import AudioRecognizer

logger = logging.getLogger(__name__)


class CaptureDevice(Protocol):
    def record(self, duration_sec: float) -> AudioSignal: ...

    def close(self) -> None: ...


CaptureFactory = Callable[[], CaptureDevice]
ResultCallback = Callable[[Prediction], None]
ErrorCallback = Callable[[Exception], None]


@dataclass(frozen=True)
class MonitorConfig:
    """Capture schedule: record 3 s of audio every 5 s."""

    interval_sec: float = 5.0
    record_duration_sec: float = 3.0

    def __post_init__(self) -> None:
        if self.interval_sec <= 0 or self.record_duration_sec <= 0:
            raise InvalidParametersError(
                f"interval_sec and record_duration_sec must be positive, got "
                f"{self.interval_sec}, {self.record_duration_sec}"
            )


class MonitoringLoop:
    """Runs recognition cycles on a fixed period until stop().

    Interface:
      loop = MonitoringLoop(
          capture_factory=AudioCollector(config).open_session,
          recognizer=recognizer,
          on_result=print,
      )
      loop.start()   # returns immediately; cycles run on timer threads
      ...
      loop.stop()    # cancels the next cycle and releases the device
    """

    def __init__(
        self,
        capture_factory: CaptureFactory,
        recognizer: AudioRecognizer,
        config: Optional[MonitorConfig] = None,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.capture_factory = capture_factory
        self.recognizer = recognizer
        self.config = config or MonitorConfig()
        self.on_result = on_result or (lambda p: None)
        self.on_error = on_error or (lambda e: None)

        self._state_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._session: Optional[CaptureDevice] = None
        self._timer: Optional[threading.Timer] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, initial_delay_sec: float = 0.0) -> bool:
        """Acquire the capture device and schedule cycles. Returns False if already running."""
        with self._state_lock:
            if self._running:
                return False
            self._session = self.capture_factory()
            self._running = True
            self._schedule(initial_delay_sec)
        logger.info(
            "Monitoring started: %.1f s clips every %.1f s",
            self.config.record_duration_sec,
            self.config.interval_sec,
        )
        return True

    def stop(self) -> None:
        """Cancel the pending cycle and release the capture device.

        A cycle already running may finish, but its result is not reported.
        """
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            session, self._session = self._session, None
        if session is not None:
            session.close()
        logger.info("Monitoring stopped")

    def _schedule(self, delay_sec: float) -> None:
        timer = threading.Timer(delay_sec, self._tick)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self) -> None:
        with self._state_lock:
            if not self._running:
                return
            self._schedule(self.config.interval_sec)
        self.run_cycle()

    def run_cycle(self) -> Optional[Prediction]:
        """Record one clip and classify it.

        Returns None without doing anything if another cycle is in flight or
        the loop is not running.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.debug("Previous cycle still in flight, skipping")
            return None
        try:
            session = self._session
            if not self._running or session is None:
                return None
            try:
                signal = session.record(self.config.record_duration_sec)
                prediction = self.recognizer.classify_signal(signal, record=False)
                with self._state_lock:
                    if not self._running:
                        logger.debug("Discarding %s: monitoring stopped", prediction.label)
                        return None
                    # statistics.record leaves counts untouched if persisting fails
                    if self.recognizer.statistics is not None:
                        self.recognizer.statistics.record(prediction)
            except Exception as exc:
                if not self._running:
                    logger.debug("Cycle abandoned after stop: %s", exc)
                    return None
                if isinstance(exc, AudioPipelineError):
                    logger.error("Recognition cycle failed: %s", exc)
                else:
                    logger.exception("Recognition cycle failed")
                self.on_error(exc)
                return None
            self.on_result(prediction)
            return prediction
        finally:
            self._cycle_lock.release()

    def __enter__(self) -> "MonitoringLoop":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
