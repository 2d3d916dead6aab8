"""Live audio capture from an input device."""

from __future__ import annotations

import logging
import queue
import threading
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):  # OSError: PortAudio library not found
    sd = None  # type: ignore

from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.signal import AudioSignal
from wildlife_audio.audio.wav import write_wav
from wildlife_audio.errors import InvalidParametersError

logger = logging.getLogger(__name__)


def _require_sounddevice() -> None:
    if sd is None:
        raise ImportError("sounddevice is required for recording. pip install sounddevice")


class CaptureSession:
    """An open input stream. Acquired once, released exactly once by close()."""

    def __init__(
        self,
        config: AudioConfig,
        device: Optional[int] = None,
        block_sec: float = 0.1,
    ):
        _require_sounddevice()
        self.config = config
        self._queue: "queue.Queue[np.ndarray]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

        def callback(indata: np.ndarray, _frames: int, _time: object, status: object) -> None:
            if status:
                logger.debug("Input stream status: %s", status)
            self._queue.put(indata.copy())

        self._stream = sd.InputStream(
            samplerate=config.sample_rate,
            channels=config.channels,
            dtype=config.dtype,
            blocksize=int(block_sec * config.sample_rate),
            device=device,
            callback=callback,
        )
        try:
            self._stream.start()
        except Exception:
            self._stream.close()
            raise
        logger.info("Opened capture device %s @ %d Hz", device, config.sample_rate)

    @property
    def closed(self) -> bool:
        return self._closed

    def record(self, duration_sec: float) -> AudioSignal:
        """Block until ``duration_sec`` of audio has been captured and return it."""
        if self._closed:
            raise RuntimeError("capture session is closed")
        needed = int(duration_sec * self.config.sample_rate)
        if needed <= 0:
            raise InvalidParametersError(
                f"duration_sec={duration_sec} is shorter than one sample at {self.config.sample_rate} Hz"
            )
        # Drop anything buffered before this clip was requested
        while not self._queue.empty():
            self._queue.get_nowait()
        blocks: List[np.ndarray] = []
        collected = 0
        while collected < needed:
            try:
                block = self._queue.get(timeout=0.5)
            except queue.Empty:
                if self._closed:
                    raise RuntimeError("capture session closed while recording") from None
                continue
            blocks.append(block)
            collected += block.shape[0]
        frames = np.concatenate(blocks, axis=0)[:needed]
        return AudioSignal.from_interleaved(frames, self.config.sample_rate)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._stream.stop()
        finally:
            self._stream.close()
            logger.info("Released capture device")

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AudioCollector:
    """Records mono 16 kHz clips from the default or a chosen input device."""

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()

    def open_session(self, device: Optional[int] = None) -> CaptureSession:
        """Acquire the input device. Caller must close() the returned session."""
        return CaptureSession(self.config, device=device)

    def record_clip(
        self,
        duration_sec: float,
        device: Optional[int] = None,
    ) -> AudioSignal:
        """Record a single clip, opening and releasing the device around it.

        Args:
            duration_sec: Recording duration in seconds.
            device: Input device index (None = default).
        """
        with self.open_session(device) as session:
            return session.record(duration_sec)

    def record_to_file(
        self,
        filepath: Union[str, Path],
        duration_sec: float,
        device: Optional[int] = None,
    ) -> AudioSignal:
        """Record a clip and save it as 16-bit PCM WAV."""
        signal = self.record_clip(duration_sec, device=device)
        write_wav(filepath, signal)
        return signal
