from sqlalchemy import Column, Integer, String, DateTime, Boolean, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from cyberlearn.core.database import Base


class UserProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "module_id", "lesson_index", name="uq_user_progress_user_module_lesson"),
        CheckConstraint("lesson_index >= 0", name="ck_user_progress_lesson_index"),
        CheckConstraint("video_progress_seconds >= 0", name="ck_user_progress_video_seconds"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    module_id = Column(String(128), nullable=False)
    lesson_index = Column(Integer, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    video_progress_seconds = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
