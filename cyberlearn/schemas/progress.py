from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class ProgressRecordBase(BaseModel):
    module_id: str
    lesson_index: int = Field(..., ge=0)


class ProgressRecord(ProgressRecordBase):
    model_config = ConfigDict(from_attributes=True)

    completed: bool = False
    completed_at: Optional[datetime] = None
    video_progress_seconds: int = 0


class VideoProgressUpdate(BaseModel):
    seconds: int


class LessonCompletion(BaseModel):
    success: bool
    record: Optional[ProgressRecord] = None


class ModuleProgress(BaseModel):
    module_id: str
    records: List[ProgressRecord]
    completed_count: int
    total_lessons: Optional[int] = None
    percent_complete: Optional[int] = None
    resume_lesson_index: Optional[int] = None
