"""Canonical 16-bit PCM WAV encoding (44-byte RIFF header + interleaved int16 samples)."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Union

import numpy as np
import scipy.io.wavfile as wavfile

from wildlife_audio.audio.signal import AudioSignal
from wildlife_audio.errors import InvalidParametersError

WAV_HEADER_SIZE = 44
PCM16_SCALE = 32767


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1] and scale to int16: round(clamp(x) * 32767)."""
    return np.round(np.clip(samples, -1.0, 1.0) * PCM16_SCALE).astype(np.int16)


def encode_wav(
    signal: AudioSignal,
    sample_rate: Optional[int] = None,
    channels: Optional[int] = None,
) -> bytes:
    """Serialize ``signal`` to WAV bytes.

    Args:
        signal: Audio to encode.
        sample_rate: Rate written to the header (default: the signal's rate).
        channels: Number of channels to write, taken in order from the signal
            (default: all of them).

    Returns:
        RIFF/WAVE bytes: 44-byte header followed by interleaved little-endian int16.
    """
    signal.require_samples()
    rate = signal.sample_rate if sample_rate is None else int(sample_rate)
    n_channels = signal.num_channels if channels is None else int(channels)
    if rate <= 0:
        raise InvalidParametersError(f"sample_rate must be positive, got {rate}")
    if not 1 <= n_channels <= signal.num_channels:
        raise InvalidParametersError(
            f"channels must be in [1, {signal.num_channels}], got {n_channels}"
        )

    # (num_samples, num_channels) rows are written frame by frame, i.e. interleaved
    pcm = np.ascontiguousarray(to_pcm16(signal.channels[:n_channels]).T).astype("<i2")
    buf = io.BytesIO()
    wavfile.write(buf, rate, pcm)
    return buf.getvalue()


def write_wav(path: Union[str, Path], signal: AudioSignal) -> None:
    """Encode ``signal`` and write it to ``path``."""
    Path(path).write_bytes(encode_wav(signal))
