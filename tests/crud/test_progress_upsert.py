import pytest
from sqlalchemy.orm import sessionmaker

from cyberlearn.crud import progress as crud_progress_module
from cyberlearn.crud.progress import user_progress as crud_progress
from cyberlearn.models.progress import UserProgress
from cyberlearn.services.progress import ProgressTracker
from tests.helpers.asserts import notice_titles

MODULE_ID = "intro-to-cybersecurity"


def _write_from_another_tab(db_session, user_id, lesson_index, seconds):
    other = sessionmaker(autocommit=False, autoflush=False, bind=db_session.get_bind())()
    try:
        crud_progress.upsert(
            other, user_id=user_id, module_id=MODULE_ID, lesson_index=lesson_index,
            fields={"video_progress_seconds": seconds},
        )
    finally:
        other.close()


@pytest.fixture
def concurrent_write_after_lookup(db_session, user_id, monkeypatch):
    """Commits a video position from a second session right after the first key lookup."""
    original = crud_progress.get_by_key
    state = {"fired": False}

    def get_by_key(db, **key):
        row = original(db, **key)
        if not state["fired"]:
            state["fired"] = True
            _write_from_another_tab(db_session, user_id, key["lesson_index"], 30)
        return row

    monkeypatch.setattr(crud_progress, "get_by_key", get_by_key)
    return state


def _stored(db_session, user_id):
    db_session.expire_all()
    return db_session.query(UserProgress).filter(UserProgress.user_id == user_id).all()


def test_completion_survives_a_concurrent_insert(db_session, notifier, identity, concurrent_write_after_lookup):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    tracker.load_for_module(db_session)

    assert tracker.mark_lesson_complete(db_session, 0) is True
    assert concurrent_write_after_lookup["fired"]
    assert notice_titles(notifier) == ["Lesson completed!"]

    rows = _stored(db_session, identity.user_id)
    assert len(rows) == 1
    assert rows[0].completed is True
    assert rows[0].video_progress_seconds == 30


def test_retry_path_updates_row_created_after_the_read(
    db_session, notifier, identity, concurrent_write_after_lookup, monkeypatch
):
    monkeypatch.setattr(crud_progress_module, "CONFLICT_INSERTS", {})
    tracker = ProgressTracker(MODULE_ID, identity, notifier)

    assert tracker.mark_lesson_complete(db_session, 0) is True
    assert concurrent_write_after_lookup["fired"]

    rows = _stored(db_session, identity.user_id)
    assert len(rows) == 1
    assert rows[0].completed is True
    assert rows[0].video_progress_seconds == 30


def test_upsert_only_touches_the_given_fields(db_session, user_id):
    crud_progress.upsert(
        db_session, user_id=user_id, module_id=MODULE_ID, lesson_index=1,
        fields={"video_progress_seconds": 12},
    )
    row = crud_progress.upsert(
        db_session, user_id=user_id, module_id=MODULE_ID, lesson_index=1,
        fields={"completed": True},
    )

    assert (row.completed, row.video_progress_seconds) == (True, 12)
    assert len(_stored(db_session, user_id)) == 1
