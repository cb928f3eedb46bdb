from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from cyberlearn.crud.base import CRUDBase
from cyberlearn.models.progress import UserProgress
from cyberlearn.schemas.progress import ProgressRecord

PROGRESS_KEY = ("user_id", "module_id", "lesson_index")

CONFLICT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

class CRUDUserProgress(CRUDBase[UserProgress, ProgressRecord, ProgressRecord]):

    def get_by_key(self, db: Session, user_id: str, module_id: str, lesson_index: int) -> Optional[UserProgress]:
        return (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user_id)
            .filter(UserProgress.module_id == module_id)
            .filter(UserProgress.lesson_index == lesson_index)
            .first()
        )

    def get_all_by_user_and_module(self, db: Session, user_id: str, module_id: str) -> List[UserProgress]:
        return (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user_id)
            .filter(UserProgress.module_id == module_id)
            .order_by(UserProgress.lesson_index)
            .all()
        )

    def upsert(
        self, db: Session, *, user_id: str, module_id: str, lesson_index: int, fields: Dict[str, Any]
    ) -> UserProgress:
        """Write `fields` onto the row for the composite key, creating it on first write.

        Last write wins: a row inserted concurrently for the same key is
        updated in place rather than failing on the unique constraint.
        """
        key = {"user_id": user_id, "module_id": module_id, "lesson_index": lesson_index}
        conflict_insert = CONFLICT_INSERTS.get(db.get_bind().dialect.name)

        if conflict_insert is None:
            return self._upsert_with_retry(db, key=key, fields=fields)

        stmt = (
            conflict_insert(UserProgress)
            .values(**key, **fields)
            .on_conflict_do_update(
                index_elements=list(PROGRESS_KEY),
                set_={**fields, "updated_at": func.now()},
            )
        )
        db.execute(stmt)
        db.commit()
        return self.get_by_key(db, **key)

    def _upsert_with_retry(self, db: Session, *, key: Dict[str, Any], fields: Dict[str, Any]) -> UserProgress:
        existing = self.get_by_key(db, **key)
        if existing:
            return self.update(db, db_obj=existing, obj_in=fields)

        try:
            return self.create(db, obj_in={**key, **fields})
        except IntegrityError:
            # another writer created the row after our read
            db.rollback()
            return self.update(db, db_obj=self.get_by_key(db, **key), obj_in=fields)


user_progress = CRUDUserProgress(UserProgress)
