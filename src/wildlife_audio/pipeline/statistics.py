"""Per-session and historical recognition counts."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Mapping, Optional, Sequence, Union

from wildlife_audio.models.classifier import Prediction

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class HistoryStore:
    """JSON file holding historical per-label counts."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self, class_names: Sequence[str]) -> Dict[str, int]:
        """Counts for ``class_names``; labels not in the file start at 0, unknown labels are dropped."""
        counts = {name: 0 for name in class_names}
        if not self.path.exists():
            return counts
        try:
            saved = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read history from %s, starting from zero: %s", self.path, exc)
            return counts
        if not isinstance(saved, dict):
            logger.warning("Ignoring malformed history in %s", self.path)
            return counts
        for name in class_names:
            value = saved.get(name)
            if isinstance(value, int) and value >= 0:
                counts[name] = value
        return counts

    def save(self, counts: Mapping[str, int]) -> None:
        """Write counts to a sibling temp file, then replace the target with it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dict(counts), f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RecognitionStatistics:
    """Thread-safe recognition counters.

    Session counts live in memory; historical counts are also written to
    ``store`` (if given) after every update.
    """

    def __init__(self, class_names: Sequence[str], store: Optional[HistoryStore] = None):
        self.class_names = tuple(class_names)
        self.store = store
        self._lock = threading.Lock()
        self._history: Deque[Prediction] = deque(maxlen=HISTORY_LIMIT)
        self._session = {name: 0 for name in self.class_names}
        if store is not None:
            self._historical = store.load(self.class_names)
        else:
            self._historical = {name: 0 for name in self.class_names}

    def record(self, prediction: Prediction) -> None:
        """Count one prediction. If the store cannot be written, nothing is counted."""
        with self._lock:
            historical = dict(self._historical)
            historical[prediction.label] = historical.get(prediction.label, 0) + 1
            if self.store is not None:
                self.store.save(historical)
            self._historical = historical
            self._history.append(prediction)
            self._session[prediction.label] = self._session.get(prediction.label, 0) + 1

    def session_counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._session)

    def historical_counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._historical)

    def history(self) -> List[Prediction]:
        with self._lock:
            return list(self._history)

    def reset_session(self) -> None:
        with self._lock:
            self._history.clear()
            self._session = {name: 0 for name in self.class_names}

    def reset_historical(self) -> Dict[str, int]:
        with self._lock:
            historical = {name: 0 for name in self.class_names}
            if self.store is not None:
                self.store.save(historical)
            self._historical = historical
            return dict(historical)
