"""Exceptions raised by the audio pipeline stages."""


class AudioPipelineError(Exception):
    """Base class for every error raised by a pipeline stage."""


class EmptySignalError(AudioPipelineError, ValueError):
    """A stage received a zero-length signal."""


class InvalidParametersError(AudioPipelineError, ValueError):
    """A configuration or call parameter is zero, negative or malformed."""


class DecodeError(AudioPipelineError):
    """The audio container could not be decoded."""


class TransformError(AudioPipelineError):
    """The FFT (or another numeric transform) failed."""


class ClassificationError(AudioPipelineError):
    """The classifier failed or returned output that does not match the label set."""
