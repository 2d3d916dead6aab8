"""Centralized audio and feature extraction configuration.

Encoding standards:
- Audio: mono 16 kHz, clips normalized to 3 s
- STFT: FFT 2048, hop 512, Hann window
- Features: 128 linear bands, log power, global min-max, resized to 94 steps
"""

from dataclasses import dataclass, fields, replace
from typing import Sequence, Tuple

from wildlife_audio.errors import InvalidParametersError


@dataclass(frozen=True)
class AudioConfig:
    """Audio recording and feature extraction configuration."""

    # Recording / preprocessing
    sample_rate: int = 16_000
    target_duration_sec: float = 3.0
    channels: int = 1  # mono
    dtype: str = "float32"

    # STFT
    fft_size: int = 2048
    hop_length: int = 512

    # Band spectrogram, tensor shape expected by the classifier
    n_bands: int = 128
    target_time_steps: int = 94

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name == "dtype":
                continue
            value = getattr(self, f.name)
            if value <= 0:
                raise InvalidParametersError(f"{f.name} must be positive, got {value!r}")
        if self.target_length == 0:
            raise InvalidParametersError(
                f"target_duration_sec={self.target_duration_sec} is shorter than one sample"
            )

    @property
    def target_length(self) -> int:
        """Clip length in samples after duration normalization."""
        return int(self.sample_rate * self.target_duration_sec)

    @property
    def num_bins(self) -> int:
        """Number of power spectrum bins kept per frame."""
        return self.fft_size // 2

    @property
    def input_shape(self) -> Tuple[int, int]:
        """Feature tensor shape (bands, time steps)."""
        return (self.n_bands, self.target_time_steps)

    def with_input_shape(self, shape: Sequence[int]) -> "AudioConfig":
        """Return a copy whose band count and time steps follow ``shape``."""
        if len(shape) != 2:
            raise InvalidParametersError(f"input shape must have 2 dimensions, got {tuple(shape)}")
        n_bands, steps = (int(v) for v in shape)
        return replace(self, n_bands=n_bands, target_time_steps=steps)
