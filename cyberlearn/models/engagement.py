from sqlalchemy import Column, Integer, String, DateTime, Float
from sqlalchemy.sql import func
from cyberlearn.core.database import Base


class UserEngagement(Base):
    """Per-user totals. Maintained outside this service, read here for ranking."""
    __tablename__ = "user_engagement"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    total_points = Column(Integer, nullable=False, default=0, index=True)
    modules_completed = Column(Integer, nullable=False, default=0)
    lessons_completed = Column(Integer, nullable=False, default=0)
    quizzes_passed = Column(Integer, nullable=False, default=0)
    average_quiz_score = Column(Float, nullable=True, default=0.0)
    streak_days = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
