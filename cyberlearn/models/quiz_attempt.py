from sqlalchemy import Column, Integer, String, DateTime, JSON, CheckConstraint, Index
from sqlalchemy.sql import func
from cyberlearn.core.database import Base

class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        CheckConstraint("score >= 0 AND score <= total_questions", name="ck_quiz_attempts_score_range"),
        Index("ix_quiz_attempts_user_module_lesson", "user_id", "module_id", "lesson_index"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False)
    module_id = Column(String(128), nullable=False)
    lesson_index = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    answers = Column(JSON, nullable=False, default=list) # [{question_index, selected_answer, correct_answer}]
    completed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
