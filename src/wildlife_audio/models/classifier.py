"""Classifier adapter: model metadata plus an opaque tensor -> probabilities callable.

The trained network lives outside this package. Any runtime (TensorFlow,
ONNX, PyTorch) can be plugged in as ``model_forward``; it receives a float32
array of shape (1, n_bands, time_steps) and returns one probability per class.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Tuple, Union

import numpy as np

from wildlife_audio.audio.signal import FeatureTensor
from wildlife_audio.errors import ClassificationError, InvalidParametersError

logger = logging.getLogger(__name__)

ModelForward = Callable[[np.ndarray], np.ndarray]

DEFAULT_INPUT_SHAPE = (128, 94)


@dataclass(frozen=True)
class ModelMetadata:
    """Label set and input shape the classifier was trained with."""

    class_names: Tuple[str, ...]
    input_shape: Tuple[int, int] = DEFAULT_INPUT_SHAPE

    def __post_init__(self) -> None:
        names = tuple(str(n) for n in self.class_names)
        if not names:
            raise InvalidParametersError("class_names must not be empty")
        if len(set(names)) != len(names):
            raise InvalidParametersError(f"class_names contains duplicates: {names}")
        shape = tuple(int(v) for v in self.input_shape)
        if len(shape) != 2 or min(shape) <= 0:
            raise InvalidParametersError(f"input_shape must be two positive ints, got {shape}")
        object.__setattr__(self, "class_names", names)
        object.__setattr__(self, "input_shape", shape)

    @property
    def num_classes(self) -> int:
        return len(self.class_names)


def load_metadata(path: Union[str, Path]) -> ModelMetadata:
    """Load ``{"classNames": [...], "inputShape": [bands, steps]}`` from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model metadata not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidParametersError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict) or not isinstance(raw.get("classNames"), list):
        raise InvalidParametersError(f"{path} must contain a 'classNames' list")
    shape = raw.get("inputShape", DEFAULT_INPUT_SHAPE)
    if not isinstance(shape, (list, tuple)):
        raise InvalidParametersError(f"{path}: 'inputShape' must be a list")
    metadata = ModelMetadata(class_names=tuple(raw["classNames"]), input_shape=tuple(shape))
    logger.info(
        "Loaded metadata: %d classes, input shape %s",
        metadata.num_classes,
        metadata.input_shape,
    )
    return metadata


@dataclass(frozen=True)
class Prediction:
    """Top class of one classification, with the full probability vector."""

    label: str
    probability: float
    probabilities: Tuple[float, ...]
    timestamp: datetime = field(default_factory=datetime.now)


class Classifier:
    """Runs feature tensors through ``model_forward`` and maps the output to labels."""

    def __init__(self, model_forward: ModelForward, metadata: ModelMetadata):
        self.model_forward = model_forward
        self.metadata = metadata

    def _forward(self, batch: np.ndarray) -> np.ndarray:
        try:
            output = self.model_forward(batch)
        except Exception as exc:
            raise ClassificationError(f"model forward failed: {exc}") from exc
        probs = np.asarray(output, dtype=np.float64).reshape(-1)
        if probs.size != self.metadata.num_classes:
            raise ClassificationError(
                f"model returned {probs.size} scores for {self.metadata.num_classes} classes"
            )
        return probs

    def warm_up(self) -> None:
        """Run one all-zero input through the model."""
        self._forward(np.zeros((1, *self.metadata.input_shape), dtype=np.float32))

    def predict(self, tensor: FeatureTensor) -> Prediction:
        if tensor.shape != self.metadata.input_shape:
            raise ClassificationError(
                f"feature tensor shape {tensor.shape} != model input shape {self.metadata.input_shape}"
            )
        probs = self._forward(tensor.as_batch())
        best = int(np.argmax(probs))
        prediction = Prediction(
            label=self.metadata.class_names[best],
            probability=float(probs[best]),
            probabilities=tuple(float(p) for p in probs),
        )
        logger.info("Predicted %s (p=%.3f)", prediction.label, prediction.probability)
        return prediction
