import logging
from typing import Callable, List, Optional, Sequence

from .models import (
    UNKNOWN_QUIZ_ID,
    AnswerRecord,
    Question,
    QuizPhase,
    QuizState,
)
from .progress import ProgressStore

logger = logging.getLogger(__name__)

StateListener = Callable[[QuizState], None]


# --- State Machine: one quiz attempt ---
class QuizEngine:
    """Runs a single attempt over an ordered list of questions.

    Calls made out of order (answering twice, advancing before answering,
    anything after completion) leave the state untouched. The score is
    written to the progress store once, on the transition to completed.
    """

    def __init__(
        self,
        store: ProgressStore,
        state: Optional[QuizState] = None,
        listeners: Optional[List[StateListener]] = None,
    ):
        self.store = store
        self.state = state if state is not None else QuizState()
        self.listeners: List[StateListener] = list(listeners or [])

    def subscribe(self, listener: StateListener) -> None:
        self.listeners.append(listener)

    def _notify(self) -> QuizState:
        for listener in self.listeners:
            listener(self.state)
        return self.state

    # --- Transitions ---
    def start(self, questions: Sequence[Question]) -> QuizState:
        self.state = QuizState(questions=list(questions), started=True)
        logger.info(f"Started {self.quiz_id} with {self.total} questions")
        return self._notify()

    def select_answer(self, answer: str) -> QuizState:
        current = self.current_question
        if current is None or self.state.explanation_shown or self.state.completed:
            return self.state

        is_correct = answer == current.correct_answer
        if is_correct:
            self.state.score += 1
        self.state.selected_answer = answer
        self.state.explanation_shown = True
        self.state.answers.append(
            AnswerRecord(
                question_id=current.id,
                user_answer=answer,
                correct_answer=current.correct_answer,
                is_correct=is_correct,
            )
        )
        return self._notify()

    def advance(self) -> QuizState:
        if not self.state.explanation_shown or self.state.completed:
            return self.state

        if self.state.current_index < self.total - 1:
            self.state.current_index += 1
            self.state.selected_answer = None
            self.state.explanation_shown = False
        else:
            self.store.save(self.quiz_id, self.state.score)
            self.state.completed = True
            logger.info(
                f"Completed {self.quiz_id}: {self.state.score}/{self.total}"
            )
        return self._notify()

    def retake(self) -> QuizState:
        return self.start(self.state.questions)

    # --- Derived queries ---
    @property
    def total(self) -> int:
        return len(self.state.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.state.current_index < self.total:
            return self.state.questions[self.state.current_index]
        return None

    @property
    def progress(self) -> float:
        if self.total == 0:
            return 0.0
        return self.state.current_index / self.total

    @property
    def quiz_id(self) -> str:
        if not self.state.questions:
            return UNKNOWN_QUIZ_ID
        return self.state.questions[0].quiz_id

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.state.score / self.total * 100)

    @property
    def phase(self) -> QuizPhase:
        if self.state.completed:
            return QuizPhase.COMPLETED
        if not self.state.started:
            return QuizPhase.NOT_STARTED
        if self.state.explanation_shown:
            return QuizPhase.ANSWER_SHOWN
        return QuizPhase.IN_PROGRESS
