"""Recognition pipeline: recognizer, statistics and the monitoring loop."""

from wildlife_audio.pipeline.monitor import MonitorConfig, MonitoringLoop
from wildlife_audio.pipeline.recognizer import AudioRecognizer
from wildlife_audio.pipeline.statistics import HistoryStore, RecognitionStatistics

__all__ = [
    "AudioRecognizer",
    "HistoryStore",
    "MonitorConfig",
    "MonitoringLoop",
    "RecognitionStatistics",
]
