import logging
from typing import Any, Callable, List, Optional, Sequence, Set

from sqlalchemy.orm import Session

from cyberlearn.core.config import settings
from cyberlearn.core.constants import QuizPhaseEnum
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.quiz import (
    QuizQuestion,
    QuizQuestionView,
    QuizResults,
    QuizSessionState,
    QuizView,
)
from cyberlearn.services.notification import Notifier
from cyberlearn.services.quiz import QuizAttemptRecorder, is_passing, percentage

logger = logging.getLogger(__name__)


class QuizSessionError(Exception):
    pass


class QuizTransitionError(QuizSessionError):
    """The requested action is not available in the quiz's current phase."""


class InvalidOptionError(QuizSessionError):
    pass


class QuizSession:
    """One learner working through a lesson's quiz, a question at a time.

    Phases: ``answering`` (current question open), ``answered`` (current
    question locked with its choice), ``results`` (after a successful
    submit, left only through `retry`). An empty question list puts the
    session in ``coming_soon`` and every action is refused.
    """

    def __init__(
        self,
        module_id: Optional[str],
        lesson_index: int,
        questions: Sequence[QuizQuestion],
        notifier: Notifier,
        *,
        history_limit: Optional[int] = None,
        owner_id: Optional[str] = None,
    ):
        self.owner_id = owner_id
        self.questions: List[QuizQuestion] = list(questions)
        self.recorder = QuizAttemptRecorder(module_id, lesson_index, notifier)
        self.current_index = 0
        self.answered: Set[int] = set()
        self.history_limit = settings.QUIZ_HISTORY_LIMIT if history_limit is None else history_limit

    @classmethod
    def from_state(cls, state: QuizSessionState, notifier: Notifier) -> "QuizSession":
        session = cls(state.module_id, state.lesson_index, state.questions, notifier, owner_id=state.owner_id)
        session.current_index = state.current_index
        session.answered = set(state.answered)
        session.recorder.answers = list(state.answers)
        session.recorder.submitted = state.submitted
        session.recorder.score = state.score
        session.recorder.previous_attempts = list(state.previous_attempts)
        return session

    def to_state(self) -> QuizSessionState:
        return QuizSessionState(
            owner_id=self.owner_id,
            module_id=self.recorder.module_id,
            lesson_index=self.recorder.lesson_index,
            questions=self.questions,
            current_index=self.current_index,
            answered=set(self.answered),
            answers=self.recorder.answers,
            submitted=self.recorder.submitted,
            score=self.recorder.score,
            previous_attempts=self.recorder.previous_attempts,
        )

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def phase(self) -> QuizPhaseEnum:
        if not self.questions:
            return QuizPhaseEnum.COMING_SOON
        if self.recorder.submitted:
            return QuizPhaseEnum.RESULTS
        if self.current_index in self.answered:
            return QuizPhaseEnum.ANSWERED
        return QuizPhaseEnum.ANSWERING

    @property
    def passed(self) -> bool:
        return self.recorder.submitted and is_passing(self.recorder.score, self.total_questions)

    @property
    def all_answered(self) -> bool:
        return bool(self.questions) and len(self.answered) == self.total_questions

    def _require_in_progress(self, action: str) -> None:
        phase = self.phase
        if phase == QuizPhaseEnum.COMING_SOON:
            raise QuizTransitionError(f"Cannot {action}: this quiz has no questions yet.")
        if phase == QuizPhaseEnum.RESULTS:
            raise QuizTransitionError(f"Cannot {action}: the quiz has already been submitted.")

    def select_answer(self, label: str) -> Optional[bool]:
        """Lock in `label` for the current question. Returns None when it was already answered."""
        self._require_in_progress("select an answer")
        if self.phase == QuizPhaseEnum.ANSWERED:
            return None

        question = self.questions[self.current_index]
        if label not in {option.label for option in question.options}:
            raise InvalidOptionError(f"'{label}' is not an option for question {self.current_index + 1}.")

        is_correct = self.recorder.record_answer(self.current_index, label, question.correct_answer)
        self.answered.add(self.current_index)
        return is_correct

    def next(self) -> int:
        self._require_in_progress("move to the next question")
        if self.current_index not in self.answered:
            raise QuizTransitionError("Answer the current question before moving on.")
        if self.current_index >= self.total_questions - 1:
            raise QuizTransitionError("This is the last question.")
        self.current_index += 1
        return self.current_index

    def previous(self) -> int:
        self._require_in_progress("move to the previous question")
        if self.current_index == 0:
            raise QuizTransitionError("This is the first question.")
        self.current_index -= 1
        return self.current_index

    def submit(self, db: Session, identity: Optional[Identity]) -> bool:
        self._require_in_progress("submit")
        if not self.all_answered:
            raise QuizTransitionError("Answer every question before submitting.")

        if not self.recorder.submit_quiz(db, identity, self.total_questions):
            return False

        self.recorder.fetch_previous_attempts(db, identity)
        return True

    def retry(self) -> None:
        if self.phase != QuizPhaseEnum.RESULTS:
            raise QuizTransitionError("Only a submitted quiz can be retried.")
        self.recorder.reset_quiz()
        self.current_index = 0
        self.answered = set()

    def continue_(self, on_complete: Optional[Callable[[], Any]] = None) -> Any:
        if self.phase != QuizPhaseEnum.RESULTS or not self.passed:
            raise QuizTransitionError("Pass the quiz to continue.")
        if on_complete is None:
            return None
        return on_complete()

    def _results(self) -> QuizResults:
        score = self.recorder.score
        attempts = self.recorder.previous_attempts
        history = [a.percentage for a in attempts[:self.history_limit]] if len(attempts) > 1 else []
        return QuizResults(
            score=score,
            total_questions=self.total_questions,
            percentage=percentage(score, self.total_questions),
            passed=self.passed,
            history=history,
        )

    def view(self) -> QuizView:
        phase = self.phase
        if phase == QuizPhaseEnum.COMING_SOON:
            return QuizView(phase=phase, total_questions=0)

        answered_count = len(self.answered)
        progress_percent = round(answered_count / self.total_questions * 100)

        if phase == QuizPhaseEnum.RESULTS:
            return QuizView(
                phase=phase,
                total_questions=self.total_questions,
                current_index=self.current_index,
                answered_count=answered_count,
                progress_percent=progress_percent,
                results=self._results(),
            )

        question = self.questions[self.current_index]
        answer = self.recorder.get_answer(self.current_index)
        is_answered = phase == QuizPhaseEnum.ANSWERED
        show_explanation = is_answered and bool(question.explanation)

        return QuizView(
            phase=phase,
            total_questions=self.total_questions,
            current_index=self.current_index,
            question=QuizQuestionView(
                question=question.question,
                options=question.options,
                correct_answer=question.correct_answer if is_answered else None,
                explanation=question.explanation if show_explanation else None,
            ),
            selected_answer=answer.selected_answer if is_answered and answer else None,
            is_correct=answer.is_correct if is_answered and answer else None,
            show_explanation=show_explanation,
            answered_count=answered_count,
            progress_percent=progress_percent,
            can_previous=self.current_index > 0,
            can_next=is_answered and self.current_index < self.total_questions - 1,
            can_submit=self.all_answered,
        )
