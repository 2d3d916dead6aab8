"""Unit tests for recognition statistics and history persistence."""

from __future__ import annotations

import json
import tempfile
import threading
import unittest
from pathlib import Path

from wildlife_audio.models import Prediction
from wildlife_audio.pipeline.statistics import HISTORY_LIMIT, HistoryStore, RecognitionStatistics

CLASSES = ("frog", "owl", "cricket")


def _prediction(label: str) -> Prediction:
    return Prediction(label=label, probability=0.9, probabilities=(0.9, 0.05, 0.05))


class TestRecognitionStatistics(unittest.TestCase):
    """Tests for in-memory counters."""

    def test_record_counts(self) -> None:
        stats = RecognitionStatistics(CLASSES)
        for label in ("frog", "owl", "frog"):
            stats.record(_prediction(label))
        self.assertEqual(stats.session_counts(), {"frog": 2, "owl": 1, "cricket": 0})
        self.assertEqual(stats.historical_counts(), {"frog": 2, "owl": 1, "cricket": 0})
        self.assertEqual([p.label for p in stats.history()], ["frog", "owl", "frog"])

    def test_history_is_bounded(self) -> None:
        stats = RecognitionStatistics(CLASSES)
        for _ in range(HISTORY_LIMIT + 5):
            stats.record(_prediction("owl"))
        self.assertEqual(len(stats.history()), HISTORY_LIMIT)
        self.assertEqual(stats.session_counts()["owl"], HISTORY_LIMIT + 5)

    def test_reset_session_keeps_historical(self) -> None:
        stats = RecognitionStatistics(CLASSES)
        stats.record(_prediction("cricket"))
        stats.reset_session()
        self.assertEqual(stats.session_counts()["cricket"], 0)
        self.assertEqual(stats.history(), [])
        self.assertEqual(stats.historical_counts()["cricket"], 1)

    def test_concurrent_records_are_not_lost(self) -> None:
        stats = RecognitionStatistics(CLASSES)

        def worker() -> None:
            for _ in range(250):
                stats.record(_prediction("frog"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(stats.session_counts()["frog"], 2000)
        self.assertEqual(stats.historical_counts()["frog"], 2000)


class TestHistoryStore(unittest.TestCase):
    """Tests for JSON persistence of historical counts."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "history.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_is_zero(self) -> None:
        self.assertEqual(HistoryStore(self.path).load(CLASSES), {"frog": 0, "owl": 0, "cricket": 0})

    def test_counts_survive_restart(self) -> None:
        stats = RecognitionStatistics(CLASSES, store=HistoryStore(self.path))
        stats.record(_prediction("owl"))
        stats.record(_prediction("owl"))
        restarted = RecognitionStatistics(CLASSES, store=HistoryStore(self.path))
        self.assertEqual(restarted.historical_counts()["owl"], 2)
        self.assertEqual(restarted.session_counts()["owl"], 0)

    def test_load_keeps_only_current_labels(self) -> None:
        self.path.write_text(json.dumps({"owl": 4, "bat": 9}))
        self.assertEqual(HistoryStore(self.path).load(CLASSES), {"frog": 0, "owl": 4, "cricket": 0})

    def test_corrupt_file_logged_and_reset(self) -> None:
        self.path.write_text("{broken")
        with self.assertLogs("wildlife_audio.pipeline.statistics", level="WARNING"):
            counts = HistoryStore(self.path).load(CLASSES)
        self.assertEqual(counts, {"frog": 0, "owl": 0, "cricket": 0})

    def test_reset_historical_persists(self) -> None:
        stats = RecognitionStatistics(CLASSES, store=HistoryStore(self.path))
        stats.record(_prediction("frog"))
        self.assertEqual(stats.reset_historical()["frog"], 0)
        self.assertEqual(json.loads(self.path.read_text())["frog"], 0)

    def test_save_leaves_no_temp_files(self) -> None:
        HistoryStore(self.path).save({"owl": 3})
        self.assertEqual([p.name for p in self.path.parent.iterdir()], ["history.json"])
        self.assertEqual(json.loads(self.path.read_text()), {"owl": 3})

    def test_failed_save_counts_nothing(self) -> None:
        self.path.mkdir()
        stats = RecognitionStatistics(CLASSES, store=HistoryStore(self.path))
        with self.assertRaises(OSError):
            stats.record(_prediction("owl"))
        self.assertEqual(stats.session_counts()["owl"], 0)
        self.assertEqual(stats.historical_counts()["owl"], 0)
        self.assertEqual(stats.history(), [])
        self.assertEqual([p.name for p in self.path.parent.iterdir()], ["history.json"])


if __name__ == "__main__":
    unittest.main()
