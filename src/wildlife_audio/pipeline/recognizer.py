"""Clip recognition: decode -> resample -> normalize length -> features -> classifier.

The classifier is injected, so any model runtime (or a test double) can be used.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.decoder import AudioSource, decode_audio
from wildlife_audio.audio.features import SpectralFeatureExtractor
from wildlife_audio.audio.preprocess import normalize_length, resample
from wildlife_audio.audio.signal import AudioSignal, FeatureTensor
from wildlife_audio.models.classifier import Classifier, Prediction
from wildlife_audio.pipeline.statistics import RecognitionStatistics

logger = logging.getLogger(__name__)


class AudioRecognizer:
    """Turns recorded or uploaded audio into predictions.

    Interface:
      recognizer = AudioRecognizer(
          classifier=Classifier(model_fn, load_metadata("metadata.json")),
          statistics=RecognitionStatistics(class_names),
          rng=np.random.default_rng(0),
      )
      prediction = recognizer.classify_file("clip.wav")
    """

    def __init__(
        self,
        classifier: Classifier,
        config: Optional[AudioConfig] = None,
        statistics: Optional[RecognitionStatistics] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        config = config or AudioConfig()
        if config.input_shape != classifier.metadata.input_shape:
            config = config.with_input_shape(classifier.metadata.input_shape)
        self.config = config
        self.classifier = classifier
        self.statistics = statistics
        self.rng = rng if rng is not None else np.random.default_rng()
        self.extractor = SpectralFeatureExtractor(self.config)

    def preprocess(self, signal: AudioSignal) -> AudioSignal:
        """Resample to the target rate and tile/crop to the target duration."""
        resampled = resample(signal, self.config.sample_rate)
        return normalize_length(resampled, self.config.target_duration_sec, rng=self.rng)

    def features(self, signal: AudioSignal) -> FeatureTensor:
        return self.extractor.extract(self.preprocess(signal))

    def classify_signal(self, signal: AudioSignal, record: bool = True) -> Prediction:
        """Classify a decoded signal; counts the result in statistics when ``record`` is set."""
        prediction = self.classifier.predict(self.features(signal))
        if record and self.statistics is not None:
            self.statistics.record(prediction)
        return prediction

    def classify_bytes(self, data: AudioSource) -> Prediction:
        return self.classify_signal(decode_audio(data))

    def classify_file(self, path: Union[str, Path]) -> Prediction:
        logger.info("Classifying %s", path)
        return self.classify_signal(decode_audio(Path(path)))
