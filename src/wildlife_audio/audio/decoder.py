"""Decode encoded audio (WAV, FLAC, OGG, ... anything libsndfile reads) into an AudioSignal."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np
import soundfile as sf

from wildlife_audio.audio.signal import AudioSignal
from wildlife_audio.audio.wav import PCM16_SCALE
from wildlife_audio.errors import DecodeError, EmptySignalError

logger = logging.getLogger(__name__)

AudioSource = Union[bytes, bytearray, str, Path, BinaryIO]


def _open(source: AudioSource) -> Union[str, BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    if isinstance(source, Path):
        return str(source)
    return source


def decode_audio(source: AudioSource) -> AudioSignal:
    """Decode an audio container into per-channel float32 samples.

    16-bit PCM is scaled by 1/32767, the inverse of ``encode_wav``; every other
    sample format is decoded to float32 by libsndfile.

    Raises:
        DecodeError: if the container cannot be read.
        EmptySignalError: if it decodes to zero samples.
    """
    handle = _open(source)
    try:
        with sf.SoundFile(handle) as f:
            sample_rate = f.samplerate
            if f.subtype == "PCM_16":
                frames = f.read(dtype="int16", always_2d=True).astype(np.float32) / PCM16_SCALE
                frames = np.clip(frames, -1.0, 1.0)
            else:
                frames = f.read(dtype="float32", always_2d=True)
    except (RuntimeError, TypeError, ValueError) as exc:
        raise DecodeError(f"could not decode audio: {exc}") from exc

    if frames.shape[0] == 0:
        raise EmptySignalError("decoded audio contains no samples")
    logger.debug(
        "Decoded %d samples x %d channels @ %d Hz",
        frames.shape[0],
        frames.shape[1],
        sample_rate,
    )
    return AudioSignal.from_interleaved(frames, sample_rate)
