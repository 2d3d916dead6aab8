"""Wildlife audio recognition - decoding, resampling, spectral features, WAV, monitoring."""

from wildlife_audio.errors import (
    AudioPipelineError,
    ClassificationError,
    DecodeError,
    EmptySignalError,
    InvalidParametersError,
    TransformError,
)

__all__ = [
    "AudioPipelineError",
    "ClassificationError",
    "DecodeError",
    "EmptySignalError",
    "InvalidParametersError",
    "TransformError",
]
