import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from redis import Redis

from .models import ProgressRecord

logger = logging.getLogger(__name__)


# --- Storage capabilities ---
class ProgressStorage(ABC):
    """Holds one serialized progress blob under a fixed key."""

    @abstractmethod
    def read(self) -> Optional[str]:
        pass

    @abstractmethod
    def write(self, blob: str) -> None:
        pass


class MemoryProgressStorage(ProgressStorage):
    def __init__(self, blob: Optional[str] = None):
        self.blob = blob

    def read(self) -> Optional[str]:
        return self.blob

    def write(self, blob: str) -> None:
        self.blob = blob


class FileProgressStorage(ProgressStorage):
    """JSON file on disk, replaced atomically on every write."""

    def __init__(self, path: str):
        self.path = path

    def read(self) -> Optional[str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def write(self, blob: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


class RedisProgressStorage(ProgressStorage):
    def __init__(self, client: Redis, key: str):
        self.client = client
        self.key = key

    def read(self) -> Optional[str]:
        return self.client.get(self.key)

    def write(self, blob: str) -> None:
        self.client.set(self.key, blob)


# --- Progress Store ---
class ProgressStore:
    """Quiz id -> last score, plus one shared last-accessed timestamp.

    The record is loaded lazily on first use and written back on every save.
    """

    def __init__(self, storage: ProgressStorage):
        self.storage = storage
        self._record: Optional[ProgressRecord] = None

    def load(self) -> ProgressRecord:
        record = ProgressRecord()
        try:
            blob = self.storage.read()
            if blob:
                record = ProgressRecord.model_validate_json(blob)
        except (ValidationError, UnicodeDecodeError) as e:
            logger.warning(f"Discarding unreadable progress record: {e}")
        self._record = record
        return record.model_copy(deep=True)

    def _current(self) -> ProgressRecord:
        if self._record is None:
            self.load()
        return self._record

    def save(self, quiz_id: str, score: int) -> ProgressRecord:
        # The cached record only changes once the write has gone through.
        record = self._current().model_copy(deep=True)
        record.scores[quiz_id] = score
        record.last_accessed_date = datetime.now()
        self.storage.write(record.model_dump_json())
        self._record = record
        logger.info(f"Saved score {score} for {quiz_id}")
        return record.model_copy(deep=True)

    def score_for(self, quiz_id: str) -> Optional[int]:
        return self._current().scores.get(quiz_id)
