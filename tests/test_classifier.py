"""Unit tests for model metadata, the classifier adapter and AudioConfig."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from typing import List

import numpy as np

from wildlife_audio.audio.config import AudioConfig
from wildlife_audio.audio.signal import FeatureTensor
from wildlife_audio.errors import ClassificationError, InvalidParametersError
from wildlife_audio.models import Classifier, ModelMetadata, load_metadata

CLASSES = ("frog", "owl", "cricket")


def _fixed_model(probs: List[float], calls: List[np.ndarray]):
    def forward(batch: np.ndarray) -> np.ndarray:
        calls.append(batch)
        return np.array([probs], dtype=np.float32)

    return forward


class TestAudioConfig(unittest.TestCase):
    """Tests for AudioConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = AudioConfig()
        self.assertEqual(config.sample_rate, 16_000)
        self.assertEqual(config.target_length, 48_000)
        self.assertEqual(config.input_shape, (128, 94))
        self.assertEqual(config.num_bins, 1024)

    def test_non_positive_values_rejected(self) -> None:
        for field_name in ("sample_rate", "fft_size", "hop_length", "n_bands", "target_time_steps"):
            with self.subTest(field=field_name):
                with self.assertRaises(InvalidParametersError):
                    AudioConfig(**{field_name: 0})
        with self.assertRaises(InvalidParametersError):
            AudioConfig(target_duration_sec=-1.0)

    def test_with_input_shape(self) -> None:
        config = AudioConfig().with_input_shape([64, 40])
        self.assertEqual(config.input_shape, (64, 40))
        with self.assertRaises(InvalidParametersError):
            AudioConfig().with_input_shape([64])


class TestModelMetadata(unittest.TestCase):
    """Tests for ModelMetadata and load_metadata."""

    def test_validation(self) -> None:
        with self.assertRaises(InvalidParametersError):
            ModelMetadata(class_names=())
        with self.assertRaises(InvalidParametersError):
            ModelMetadata(class_names=("a", "a"))
        with self.assertRaises(InvalidParametersError):
            ModelMetadata(class_names=("a",), input_shape=(128, 0))

    def test_load_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metadata.json"
            path.write_text(json.dumps({"classNames": list(CLASSES), "inputShape": [64, 40]}))
            metadata = load_metadata(path)
        self.assertEqual(metadata.class_names, CLASSES)
        self.assertEqual(metadata.input_shape, (64, 40))
        self.assertEqual(metadata.num_classes, 3)

    def test_load_metadata_default_shape(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metadata.json"
            path.write_text(json.dumps({"classNames": ["frog"]}))
            self.assertEqual(load_metadata(path).input_shape, (128, 94))

    def test_load_metadata_malformed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metadata.json"
            for text in ("{not json", json.dumps({"labels": ["x"]}), json.dumps({"classNames": ["x"], "inputShape": 5})):
                with self.subTest(text=text):
                    path.write_text(text)
                    with self.assertRaises(InvalidParametersError):
                        load_metadata(path)

    def test_load_metadata_missing(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_metadata("/nonexistent/metadata.json")


class TestClassifier(unittest.TestCase):
    """Tests for Classifier.predict and warm_up."""

    def setUp(self) -> None:
        self.metadata = ModelMetadata(class_names=CLASSES, input_shape=(8, 5))
        self.tensor = FeatureTensor(np.full((8, 5), 0.5))

    def test_predict_argmax(self) -> None:
        calls: List[np.ndarray] = []
        classifier = Classifier(_fixed_model([0.1, 0.7, 0.2], calls), self.metadata)
        prediction = classifier.predict(self.tensor)
        self.assertEqual(prediction.label, "owl")
        self.assertAlmostEqual(prediction.probability, 0.7, places=6)
        self.assertEqual(len(prediction.probabilities), 3)
        self.assertEqual(calls[0].shape, (1, 8, 5))

    def test_shape_mismatch(self) -> None:
        classifier = Classifier(_fixed_model([1, 0, 0], []), self.metadata)
        with self.assertRaises(ClassificationError):
            classifier.predict(FeatureTensor(np.zeros((8, 6))))

    def test_wrong_output_length(self) -> None:
        classifier = Classifier(_fixed_model([0.5, 0.5], []), self.metadata)
        with self.assertRaises(ClassificationError):
            classifier.predict(self.tensor)

    def test_model_exception_wrapped(self) -> None:
        def broken(_batch: np.ndarray) -> np.ndarray:
            raise RuntimeError("runtime exploded")

        with self.assertRaises(ClassificationError):
            Classifier(broken, self.metadata).predict(self.tensor)

    def test_warm_up_uses_zero_input(self) -> None:
        calls: List[np.ndarray] = []
        Classifier(_fixed_model([1, 0, 0], calls), self.metadata).warm_up()
        self.assertEqual(calls[0].shape, (1, 8, 5))
        self.assertFalse(np.any(calls[0]))


if __name__ == "__main__":
    unittest.main()
