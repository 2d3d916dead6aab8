"""Immutable value types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from wildlife_audio.errors import EmptySignalError, InvalidParametersError


def _frozen(value: object) -> np.ndarray:
    """Read-only float32 array for value; copies only when value is a writable array we would alias."""
    data = np.asarray(value, dtype=np.float32)
    if data.flags.writeable and isinstance(value, np.ndarray) and np.may_share_memory(data, value):
        data = data.copy()
    data.setflags(write=False)
    return data


@dataclass(frozen=True, eq=False)
class AudioSignal:
    """Float32 samples in [-1, 1], one row per channel, tagged with a sample rate.

    ``channels`` has shape (num_channels, num_samples) and is read-only.
    """

    channels: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        data = _frozen(self.channels)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.ndim != 2 or data.shape[0] == 0:
            raise InvalidParametersError(
                f"channels must have shape (num_channels, num_samples), got {data.shape}"
            )
        if int(self.sample_rate) <= 0:
            raise InvalidParametersError(f"sample_rate must be positive, got {self.sample_rate}")
        object.__setattr__(self, "channels", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def mono(cls, samples: np.ndarray, sample_rate: int) -> AudioSignal:
        """Build a single-channel signal from a 1-D sample array."""
        return cls(np.reshape(samples, (1, -1)), sample_rate)

    @classmethod
    def from_interleaved(cls, frames: np.ndarray, sample_rate: int) -> AudioSignal:
        """Build a signal from a (num_samples, num_channels) array, as audio libraries return."""
        frames = np.asarray(frames)
        if frames.ndim == 1:
            return cls.mono(frames, sample_rate)
        return cls(frames.T, sample_rate)

    @property
    def num_channels(self) -> int:
        return self.channels.shape[0]

    @property
    def length(self) -> int:
        """Samples per channel."""
        return self.channels.shape[1]

    @property
    def duration_sec(self) -> float:
        return self.length / self.sample_rate

    def first_channel(self) -> np.ndarray:
        """Samples of channel 0. Other channels are dropped, not mixed."""
        return self.channels[0]

    def require_samples(self) -> None:
        """Raise EmptySignalError if the signal holds no samples."""
        if self.length == 0:
            raise EmptySignalError("audio signal is empty")

    def __len__(self) -> int:
        return self.length


@dataclass(frozen=True, eq=False)
class FeatureTensor:
    """Normalized band spectrogram of shape (n_bands, target_time_steps), values in [0, 1]."""

    values: np.ndarray

    def __post_init__(self) -> None:
        data = _frozen(self.values)
        if data.ndim != 2:
            raise InvalidParametersError(f"feature tensor must be 2-D, got shape {data.shape}")
        object.__setattr__(self, "values", data)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape  # type: ignore[return-value]

    @property
    def n_bands(self) -> int:
        return self.values.shape[0]

    @property
    def time_steps(self) -> int:
        return self.values.shape[1]

    def as_batch(self) -> np.ndarray:
        """Return a (1, n_bands, time_steps) copy, the classifier's input layout."""
        return self.values[np.newaxis, :, :].copy()
