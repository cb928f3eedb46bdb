from sqlalchemy.orm import Session
from typing import List

from cyberlearn.crud.base import CRUDBase
from cyberlearn.models.quiz_attempt import QuizAttempt
from cyberlearn.schemas.quiz import QuizAttemptCreate

class CRUDQuizAttempt(CRUDBase[QuizAttempt, QuizAttemptCreate, QuizAttemptCreate]):

    def create(self, db: Session, *, obj_in: QuizAttemptCreate, commit: bool = True) -> QuizAttempt:
        # is_correct is derived, only the raw selections are stored
        obj_in_data = obj_in.model_dump(mode="json", exclude={"answers"})
        obj_in_data["answers"] = [
            answer.model_dump(mode="json", include={"question_index", "selected_answer", "correct_answer"})
            for answer in obj_in.answers
        ]
        return super().create(db, obj_in=obj_in_data, commit=commit)

    def get_by_user_module_and_lesson(
        self, db: Session, user_id: str, module_id: str, lesson_index: int
    ) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == user_id)
            .filter(QuizAttempt.module_id == module_id)
            .filter(QuizAttempt.lesson_index == lesson_index)
            .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc())
            .all()
        )


quiz_attempt = CRUDQuizAttempt(QuizAttempt)
