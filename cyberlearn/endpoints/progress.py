from typing import Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from cyberlearn.schemas.response import APIResponse
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.progress import LessonCompletion, ModuleProgress, ProgressRecord, VideoProgressUpdate
from cyberlearn.services.notification import Notifier, get_notifier
from cyberlearn.services.progress import ProgressTracker
from cyberlearn.utils import deps

router = APIRouter()


@router.get("/modules/{module_id}/progress", response_model=APIResponse[ModuleProgress])
async def get_module_progress(
    *,
    db: Session = Depends(deps.get_db),
    module_id: str,
    total_lessons: Optional[int] = Query(None, ge=0),
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    tracker = ProgressTracker(module_id, identity, notifier)
    records = tracker.load_for_module(db)

    progress = ModuleProgress(
        module_id=module_id,
        records=records,
        completed_count=tracker.get_completed_count(),
        total_lessons=total_lessons,
    )
    if total_lessons is not None:
        progress.percent_complete = tracker.get_percent_complete(total_lessons)
        progress.resume_lesson_index = tracker.get_resume_lesson(total_lessons)

    return APIResponse(message="Progress retrieved successfully", data=progress, notices=notifier.notices)


@router.post("/modules/{module_id}/lessons/{lesson_index}/complete", response_model=APIResponse[LessonCompletion])
async def complete_lesson(
    *,
    db: Session = Depends(deps.get_db),
    module_id: str,
    lesson_index: int = Path(..., ge=0),
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    tracker = ProgressTracker(module_id, identity, notifier)
    tracker.load_for_module(db)
    success = tracker.mark_lesson_complete(db, lesson_index)

    record = next((p for p in tracker.progress if p.lesson_index == lesson_index), None)
    return APIResponse(
        message="Lesson completed successfully" if success else "Lesson progress was not saved",
        data=LessonCompletion(success=success, record=record if success else None),
        notices=notifier.notices
    )


@router.put("/modules/{module_id}/lessons/{lesson_index}/video-progress", response_model=APIResponse[ProgressRecord])
async def update_video_progress(
    *,
    db: Session = Depends(deps.get_db),
    module_id: str,
    lesson_index: int = Path(..., ge=0),
    progress_in: VideoProgressUpdate,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    tracker = ProgressTracker(module_id, identity, notifier)
    tracker.load_for_module(db)
    tracker.update_video_progress(db, lesson_index, progress_in.seconds)

    record = next((p for p in tracker.progress if p.lesson_index == lesson_index), None)
    return APIResponse(message="Video progress received", data=record, notices=notifier.notices)
