import os

os.environ.setdefault("JAVAQUIZ_LOG_TO_DB", "0")

import pytest

from javaquiz.models import Level, Question
from javaquiz.progress import MemoryProgressStorage, ProgressStore


class FakeRedis:
    """In-memory stand-in for the few redis calls the app makes."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


def make_questions(count, level=Level.BEGINNER, topic="Syntax"):
    return [
        Question(
            id=f"q{i}",
            level=level,
            topic=topic,
            text=f"Question {i}?",
            options=[f"right {i}", f"wrong {i}", "maybe"],
            correct_answer=f"right {i}",
            explanation=f"Because {i}.",
        )
        for i in range(count)
    ]


@pytest.fixture
def storage():
    return MemoryProgressStorage()


@pytest.fixture
def store(storage):
    return ProgressStore(storage)


@pytest.fixture
def fake_redis():
    return FakeRedis()


class FailingOnceStorage(MemoryProgressStorage):
    """Memory storage whose first write raises."""

    def __init__(self):
        super().__init__()
        self.failed = False

    def write(self, blob):
        if not self.failed:
            self.failed = True
            raise OSError("disk full")
        super().write(blob)
