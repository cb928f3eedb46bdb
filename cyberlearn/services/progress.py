import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cyberlearn.core.config import settings
from cyberlearn.crud.progress import user_progress as crud_progress
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.progress import ProgressRecord
from cyberlearn.services.notification import Notifier

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Lesson completion and video position for one user within one module.

    Reads go through the in-memory list loaded by `load_for_module`; writes
    update that list optimistically and upsert the row keyed on
    (user_id, module_id, lesson_index).
    """

    def __init__(
        self,
        module_id: Optional[str],
        identity: Optional[Identity],
        notifier: Notifier,
        *,
        rollback_on_failure: Optional[bool] = None,
        video_resets_completion: Optional[bool] = None,
    ):
        self.module_id = module_id
        self.identity = identity
        self.notifier = notifier
        self.rollback_on_failure = (
            settings.PROGRESS_ROLLBACK_ON_FAILURE if rollback_on_failure is None else rollback_on_failure
        )
        self.video_resets_completion = (
            settings.VIDEO_PROGRESS_RESETS_COMPLETION if video_resets_completion is None else video_resets_completion
        )
        self.progress: List[ProgressRecord] = []

    @property
    def can_write(self) -> bool:
        return bool(self.module_id) and self.identity is not None

    def _find(self, lesson_index: int) -> Optional[ProgressRecord]:
        return next((p for p in self.progress if p.lesson_index == lesson_index), None)

    def _apply(self, lesson_index: int, **fields) -> ProgressRecord:
        existing = self._find(lesson_index)
        if existing:
            updated = existing.model_copy(update=fields)
            self.progress = [updated if p.lesson_index == lesson_index else p for p in self.progress]
            return updated

        record = ProgressRecord(module_id=self.module_id, lesson_index=lesson_index, **fields)
        self.progress = [*self.progress, record]
        return record

    def load_for_module(self, db: Session) -> List[ProgressRecord]:
        if not self.can_write:
            self.progress = []
            return []

        try:
            rows = crud_progress.get_all_by_user_and_module(
                db, user_id=self.identity.user_id, module_id=self.module_id
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching progress for module {self.module_id}: {e}")
            return list(self.progress)

        self.progress = [ProgressRecord.model_validate(row) for row in rows]
        return list(self.progress)

    def mark_lesson_complete(self, db: Session, lesson_index: int) -> bool:
        if not self.can_write:
            self.notifier.sign_in_required("Please sign in to track your progress")
            return False

        completed_at = datetime.now(timezone.utc)
        snapshot = list(self.progress)
        self._apply(lesson_index, completed=True, completed_at=completed_at)

        try:
            crud_progress.upsert(
                db,
                user_id=self.identity.user_id,
                module_id=self.module_id,
                lesson_index=lesson_index,
                fields={"completed": True, "completed_at": completed_at},
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving progress for lesson {lesson_index} of {self.module_id}: {e}")
            if self.rollback_on_failure:
                self.progress = snapshot
            self.notifier.error("Error", "Failed to save progress")
            return False

        self.notifier.success("Lesson completed!", "Your progress has been saved")
        return True

    def update_video_progress(self, db: Session, lesson_index: int, seconds: int) -> None:
        if not self.can_write:
            return

        seconds = max(0, int(seconds))
        fields = {"video_progress_seconds": seconds}
        if self.video_resets_completion:
            fields["completed"] = False

        snapshot = list(self.progress)
        self._apply(lesson_index, **fields)

        try:
            crud_progress.upsert(
                db,
                user_id=self.identity.user_id,
                module_id=self.module_id,
                lesson_index=lesson_index,
                fields=fields,
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Dropped video progress for lesson {lesson_index} of {self.module_id}: {e}")
            if self.rollback_on_failure:
                self.progress = snapshot

    def get_video_progress(self, lesson_index: int) -> int:
        item = self._find(lesson_index)
        return item.video_progress_seconds if item else 0

    def is_lesson_completed(self, lesson_index: int) -> bool:
        item = self._find(lesson_index)
        return item.completed if item else False

    def get_completed_count(self) -> int:
        return len([p for p in self.progress if p.completed])

    def get_percent_complete(self, total_lessons: int) -> int:
        if total_lessons <= 0:
            return 0
        completed = len([p for p in self.progress if p.completed and p.lesson_index < total_lessons])
        return min(100, round(completed / total_lessons * 100))

    def get_resume_lesson(self, total_lessons: int) -> int:
        """First lesson not yet completed; the last lesson once everything is done."""
        if total_lessons <= 0:
            return 0
        for lesson_index in range(total_lessons):
            if not self.is_lesson_completed(lesson_index):
                return lesson_index
        return total_lessons - 1
