"""Audio decoding, preprocessing, feature extraction, WAV encoding and capture."""

from wildlife_audio.audio.collector import AudioCollector, CaptureSession
from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.decoder import decode_audio
from wildlife_audio.audio.features import SpectralFeatureExtractor, extract_features
from wildlife_audio.audio.preprocess import normalize_length, resample
from wildlife_audio.audio.signal import AudioSignal, FeatureTensor
from wildlife_audio.audio.wav import encode_wav, write_wav

__all__ = [
    "AudioCollector",
    "AudioConfig",
    "AudioSignal",
    "CaptureSession",
    "FeatureTensor",
    "SpectralFeatureExtractor",
    "decode_audio",
    "encode_wav",
    "extract_features",
    "normalize_length",
    "resample",
    "write_wav",
]
