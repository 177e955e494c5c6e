from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN_QUIZ_ID = "unknown-quiz"


# --- Models ---
class Level(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class QuizPhase(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    ANSWER_SHOWN = "AnswerShown"
    COMPLETED = "Completed"


class Question(BaseModel):
    # correct_answer is not checked against options
    model_config = ConfigDict(frozen=True)

    id: str
    level: Level
    topic: str
    text: str
    options: List[str] = Field(min_length=1)
    correct_answer: str
    explanation: str = ""

    @property
    def quiz_id(self) -> str:
        return f"{self.level.value}-{self.topic}"


class AnswerRecord(BaseModel):
    question_id: str
    user_answer: str
    correct_answer: str
    is_correct: bool


class QuizState(BaseModel):
    questions: List[Question] = Field(default_factory=list)
    current_index: int = 0
    score: int = 0
    selected_answer: Optional[str] = None
    explanation_shown: bool = False
    completed: bool = False
    started: bool = False
    answers: List[AnswerRecord] = Field(default_factory=list)


class ProgressRecord(BaseModel):
    scores: Dict[str, int] = Field(default_factory=dict)
    last_accessed_date: Optional[datetime] = None


class SessionData(BaseModel):
    state: QuizState
    created_at: datetime
    level: Level
    topic: str
