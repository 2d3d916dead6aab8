"""Sample-rate conversion and duration normalization ahead of feature extraction."""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from wildlife_audio.audio.signal import AudioSignal
from wildlife_audio.errors import InvalidParametersError

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resample(signal: AudioSignal, target_rate: int) -> AudioSignal:
    """Convert the first channel of ``signal`` to ``target_rate`` by linear interpolation.

    Output length is ``round(length * target_rate / sample_rate)``. Positions at
    or past the last source sample take that sample verbatim. Multi-channel
    input keeps only channel 0.

    Raises:
        EmptySignalError: if the signal has no samples.
        InvalidParametersError: if ``target_rate`` is not positive.
    """
    signal.require_samples()
    if target_rate <= 0:
        raise InvalidParametersError(f"target_rate must be positive, got {target_rate}")

    source = signal.first_channel()
    if signal.sample_rate == target_rate:
        return AudioSignal.mono(source, target_rate)

    source_length = source.shape[0]
    target_length = _round_half_up(source_length * target_rate / signal.sample_rate)
    step = signal.sample_rate / target_rate

    positions = np.arange(target_length, dtype=np.float64) * step
    index = np.floor(positions).astype(np.int64)
    fraction = positions - index

    last = source_length - 1
    lo = np.minimum(index, last)
    hi = np.minimum(index + 1, last)
    out = source[lo] * (1.0 - fraction) + source[hi] * fraction
    out[index >= last] = source[last]

    logger.debug(
        "Resampled %d samples @ %d Hz -> %d samples @ %d Hz",
        source_length,
        signal.sample_rate,
        target_length,
        target_rate,
    )
    return AudioSignal.mono(out, target_rate)


def normalize_length(
    signal: AudioSignal,
    target_duration_sec: float,
    rng: Optional[np.random.Generator] = None,
) -> AudioSignal:
    """Tile or crop the first channel to exactly ``floor(sample_rate * target_duration_sec)`` samples.

    Short clips are repeated from the start until the target is filled (the last
    copy may be partial). Long clips are cropped to a window whose offset is drawn
    uniformly from ``[0, length - target_length]`` using ``rng``; pass a seeded
    generator for reproducible crops.
    """
    signal.require_samples()
    target_length = int(signal.sample_rate * target_duration_sec)
    if target_length <= 0:
        raise InvalidParametersError(
            f"target_duration_sec={target_duration_sec} gives {target_length} samples"
        )

    samples = signal.first_channel()
    length = samples.shape[0]
    if length == target_length:
        return AudioSignal.mono(samples, signal.sample_rate)

    if length < target_length:
        # np.resize repeats the input cyclically
        out = np.resize(samples, target_length)
        logger.debug("Tiled %d samples to %d", length, target_length)
        return AudioSignal.mono(out, signal.sample_rate)

    if rng is None:
        rng = np.random.default_rng()
    offset = int(rng.integers(0, length - target_length, endpoint=True))
    logger.debug("Cropped %d samples to %d at offset %d", length, target_length, offset)
    return AudioSignal.mono(samples[offset : offset + target_length], signal.sample_rate)
