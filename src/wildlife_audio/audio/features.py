"""Feature extraction: framing, Hann window, FFT power, linear bands, log, min-max, resize."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import scipy.fft

from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.signal import AudioSignal, FeatureTensor
from wildlife_audio.errors import InvalidParametersError, TransformError

logger = logging.getLogger(__name__)

# Floor applied before log10 so silent bands map to -100 dB instead of -inf
POWER_FLOOR = 1e-10


def frame_signal(samples: np.ndarray, fft_size: int, hop_length: int) -> np.ndarray:
    """Slice samples into (num_frames, fft_size) frames at ``hop_length`` stride.

    Frames that would run past the end are not emitted. Input no longer than
    ``fft_size`` yields a single zero-padded frame.
    """
    n = samples.shape[0]
    if n <= fft_size:
        frame = np.zeros((1, fft_size), dtype=np.float32)
        frame[0, :n] = samples
        return frame
    num_frames = (n - fft_size) // hop_length + 1
    starts = np.arange(num_frames) * hop_length
    return samples[starts[:, np.newaxis] + np.arange(fft_size)[np.newaxis, :]]


def hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*j / (size - 1)))."""
    if size == 1:
        return np.ones(1)
    j = np.arange(size)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * j / (size - 1)))


def power_spectrum(frames: np.ndarray, fft_size: int) -> np.ndarray:
    """Hann-windowed FFT power per frame, (re^2 + im^2) / fft_size over the first fft_size/2 bins."""
    windowed = frames * hann_window(fft_size)
    try:
        spectrum = scipy.fft.rfft(windowed, n=fft_size, axis=1)
    except (ValueError, TypeError, RuntimeError) as exc:
        raise TransformError(f"FFT of {frames.shape[0]} frames failed: {exc}") from exc
    spectrum = spectrum[:, : fft_size // 2]
    return (spectrum.real ** 2 + spectrum.imag ** 2) / fft_size


def band_edges(num_bins: int, n_bands: int) -> np.ndarray:
    """Bin boundaries of ``n_bands`` equal-width linear bands, shape (n_bands + 1,)."""
    width = num_bins / n_bands
    return np.floor(np.arange(n_bands + 1) * width).astype(np.int64)


def band_average(power: np.ndarray, n_bands: int) -> np.ndarray:
    """Average power over contiguous equal-width bin ranges, (frames, bins) -> (frames, n_bands).

    This is a uniform linear split of the spectrum, not a perceptual mel scale.
    A band whose range is empty gets 0.
    """
    edges = band_edges(power.shape[1], n_bands)
    bands = np.zeros((power.shape[0], n_bands), dtype=np.float64)
    for i in range(n_bands):
        start, end = edges[i], edges[i + 1]
        if end > start:
            bands[:, i] = power[:, start:end].mean(axis=1)
    return bands


def to_decibels(values: np.ndarray) -> np.ndarray:
    return 10.0 * np.log10(np.maximum(values, POWER_FLOOR))


def minmax_normalize(matrix: np.ndarray) -> np.ndarray:
    """Scale the whole matrix to [0, 1] with one global min and max.

    A constant matrix maps to all zeros.
    """
    lo = matrix.min()
    hi = matrix.max()
    if hi == lo:
        return np.zeros_like(matrix)
    return (matrix - lo) / (hi - lo)


def resize_time_axis(matrix: np.ndarray, target_steps: int) -> np.ndarray:
    """Linearly resample the second axis of (bands, frames) to ``target_steps`` columns."""
    num_frames = matrix.shape[1]
    if target_steps == 1:
        positions = np.zeros(1)
    else:
        positions = np.arange(target_steps) * (num_frames - 1) / (target_steps - 1)
    lo = np.floor(positions).astype(np.int64)
    hi = np.minimum(lo + 1, num_frames - 1)
    alpha = positions - lo
    return (1.0 - alpha) * matrix[:, lo] + alpha * matrix[:, hi]


def extract_features(
    signal: AudioSignal,
    n_bands: int = 128,
    target_time_steps: int = 94,
    fft_size: int = 2048,
    hop_length: int = 512,
) -> FeatureTensor:
    """Compute the (n_bands, target_time_steps) feature tensor of the first channel.

    Raises:
        InvalidParametersError: if any size parameter is zero or negative.
        EmptySignalError: if the signal has no samples.
        TransformError: if the FFT fails.
    """
    for name, value in (
        ("n_bands", n_bands),
        ("target_time_steps", target_time_steps),
        ("fft_size", fft_size),
        ("hop_length", hop_length),
    ):
        if value <= 0:
            raise InvalidParametersError(f"{name} must be positive, got {value}")
    signal.require_samples()

    frames = frame_signal(signal.first_channel(), fft_size, hop_length)
    power = power_spectrum(frames, fft_size)
    bands = to_decibels(band_average(power, n_bands)).T  # (n_bands, num_frames)
    normalized = minmax_normalize(bands)
    resized = resize_time_axis(normalized, target_time_steps)

    logger.debug(
        "Extracted features: %d frames -> %s",
        frames.shape[0],
        resized.shape,
    )
    return FeatureTensor(np.clip(resized, 0.0, 1.0))


class SpectralFeatureExtractor:
    """Extract classifier input tensors with the parameters of an AudioConfig."""

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()

    def band_spectrogram(self, signal: AudioSignal) -> np.ndarray:
        """Log band power before normalization, shape (n_bands, num_frames)."""
        signal.require_samples()
        frames = frame_signal(signal.first_channel(), self.config.fft_size, self.config.hop_length)
        power = power_spectrum(frames, self.config.fft_size)
        return to_decibels(band_average(power, self.config.n_bands)).T

    def extract(self, signal: AudioSignal) -> FeatureTensor:
        return extract_features(
            signal,
            n_bands=self.config.n_bands,
            target_time_steps=self.config.target_time_steps,
            fft_size=self.config.fft_size,
            hop_length=self.config.hop_length,
        )
