from wildlife_audio.models.classifier import Classifier, ModelMetadata, Prediction, load_metadata

__all__ = ["Classifier", "ModelMetadata", "Prediction", "load_metadata"]
