import logging
from typing import Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cyberlearn.core.config import settings
from cyberlearn.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.quiz import QuizAnswer, QuizAttempt, QuizAttemptCreate
from cyberlearn.services.notification import Notifier

logger = logging.getLogger(__name__)


def score_answers(answers: Iterable[QuizAnswer], total_questions: int) -> int:
    """Count correct answers, ignoring any recorded past the end of the quiz."""
    return len([a for a in answers if a.is_correct and a.question_index < total_questions])


def percentage(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return round(score / total_questions * 100)


def is_passing(score: int, total_questions: int, threshold: Optional[float] = None) -> bool:
    if total_questions <= 0:
        return False
    threshold = settings.QUIZ_PASS_THRESHOLD if threshold is None else threshold
    return score / total_questions >= threshold


class QuizAttemptRecorder:
    """Answers for the quiz currently being taken on one lesson.

    Nothing is persisted until `submit_quiz`, which inserts a new attempt
    every time it succeeds. `reset_quiz` starts over without touching the
    stored history.
    """

    def __init__(self, module_id: Optional[str], lesson_index: int, notifier: Notifier):
        self.module_id = module_id
        self.lesson_index = lesson_index
        self.notifier = notifier
        self.answers: List[QuizAnswer] = []
        self.submitted = False
        self.score = 0
        self.previous_attempts: List[QuizAttempt] = []

    def get_answer(self, question_index: int) -> Optional[QuizAnswer]:
        return next((a for a in self.answers if a.question_index == question_index), None)

    def record_answer(self, question_index: int, selected_answer: str, correct_answer: str) -> bool:
        answer = QuizAnswer(
            question_index=question_index,
            selected_answer=selected_answer,
            correct_answer=correct_answer,
        )
        if self.get_answer(question_index):
            self.answers = [answer if a.question_index == question_index else a for a in self.answers]
        else:
            self.answers = [*self.answers, answer]
        return answer.is_correct

    def submit_quiz(self, db: Session, identity: Optional[Identity], total_questions: int) -> bool:
        if identity is None or not self.module_id:
            self.notifier.sign_in_required("Please sign in to save your quiz results")
            return False

        if self.submitted:
            self.notifier.error("Already submitted", "Retry the quiz to submit a new attempt")
            return False

        if total_questions < 1:
            self.notifier.error("Error", "This quiz has no questions to submit")
            return False

        final_score = score_answers(self.answers, total_questions)

        try:
            attempt_in = QuizAttemptCreate(
                user_id=identity.user_id,
                module_id=self.module_id,
                lesson_index=self.lesson_index,
                score=final_score,
                total_questions=total_questions,
                answers=self.answers,
            )
            crud_quiz_attempt.create(db, obj_in=attempt_in)
        except ValidationError as e:
            logger.error(f"Rejected quiz attempt for lesson {self.lesson_index} of {self.module_id}: {e}")
            self.notifier.error("Error", "Failed to save quiz results")
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving quiz for lesson {self.lesson_index} of {self.module_id}: {e}")
            self.notifier.error("Error", "Failed to save quiz results")
            return False

        self.score = final_score
        self.submitted = True

        percent = percentage(final_score, total_questions)
        description = f"You scored {final_score}/{total_questions} ({percent}%)"
        if is_passing(final_score, total_questions):
            self.notifier.success("Quiz Passed! 🎉", description)
        else:
            self.notifier.error("Quiz Complete", description)

        logger.info(
            f"Quiz attempt stored for user {identity.user_id}: "
            f"{self.module_id}#{self.lesson_index} {final_score}/{total_questions}"
        )
        return True

    def reset_quiz(self) -> None:
        self.answers = []
        self.submitted = False
        self.score = 0

    def fetch_previous_attempts(self, db: Session, identity: Optional[Identity]) -> List[QuizAttempt]:
        if identity is None or not self.module_id:
            return []

        try:
            rows = crud_quiz_attempt.get_by_user_module_and_lesson(
                db, user_id=identity.user_id, module_id=self.module_id, lesson_index=self.lesson_index
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching quiz attempts for lesson {self.lesson_index} of {self.module_id}: {e}")
            return []

        self.previous_attempts = [QuizAttempt.model_validate(row) for row in rows]
        return list(self.previous_attempts)
