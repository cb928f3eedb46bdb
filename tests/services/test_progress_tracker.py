import pytest
from sqlalchemy.exc import OperationalError

from cyberlearn.models.progress import UserProgress
from cyberlearn.services import progress as progress_service
from cyberlearn.services.progress import ProgressTracker
from tests.helpers.asserts import notice_titles

MODULE_ID = "intro-to-cybersecurity"


def _rows(db_session, user_id):
    return db_session.query(UserProgress).filter(UserProgress.user_id == user_id).all()


def _boom(*args, **kwargs):
    raise OperationalError("UPSERT user_progress", {}, Exception("connection reset"))


def test_signed_out_tracker_loads_nothing_and_refuses_writes(db_session, notifier):
    tracker = ProgressTracker(MODULE_ID, None, notifier)

    assert tracker.load_for_module(db_session) == []
    assert tracker.mark_lesson_complete(db_session, 0) is False
    assert notice_titles(notifier) == ["Sign in required"]
    assert notifier.notices[0].variant == "destructive"
    assert db_session.query(UserProgress).count() == 0


def test_missing_module_behaves_like_signed_out(db_session, notifier, identity):
    tracker = ProgressTracker(None, identity, notifier)

    assert tracker.mark_lesson_complete(db_session, 0) is False
    assert notice_titles(notifier) == ["Sign in required"]


def test_mark_lesson_complete_twice_keeps_one_row(db_session, notifier, identity):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    tracker.load_for_module(db_session)

    assert tracker.mark_lesson_complete(db_session, 2) is True
    first_completed_at = _rows(db_session, identity.user_id)[0].completed_at
    assert tracker.mark_lesson_complete(db_session, 2) is True

    rows = _rows(db_session, identity.user_id)
    assert len(rows) == 1
    assert rows[0].completed is True
    assert rows[0].lesson_index == 2
    assert rows[0].completed_at >= first_completed_at
    assert tracker.is_lesson_completed(2)
    assert tracker.get_completed_count() == 1
    assert notice_titles(notifier) == ["Lesson completed!", "Lesson completed!"]


def test_progress_is_scoped_to_user_and_module(db_session, notifier, identity):
    ProgressTracker(MODULE_ID, identity, notifier).mark_lesson_complete(db_session, 0)
    ProgressTracker("network-defense", identity, notifier).mark_lesson_complete(db_session, 0)

    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    records = tracker.load_for_module(db_session)
    assert [(r.module_id, r.lesson_index) for r in records] == [(MODULE_ID, 0)]


def test_video_progress_round_trip(db_session, notifier, identity):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    tracker.load_for_module(db_session)

    assert tracker.get_video_progress(1) == 0
    tracker.update_video_progress(db_session, 1, 42)
    assert tracker.get_video_progress(1) == 42

    reloaded = ProgressTracker(MODULE_ID, identity, notifier)
    reloaded.load_for_module(db_session)
    assert reloaded.get_video_progress(1) == 42
    assert reloaded.is_lesson_completed(1) is False
    assert notifier.notices == []


def test_negative_video_offset_is_clamped(db_session, notifier, identity):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    tracker.update_video_progress(db_session, 0, -5)

    assert tracker.get_video_progress(0) == 0
    assert _rows(db_session, identity.user_id)[0].video_progress_seconds == 0


def test_signed_out_video_progress_is_a_silent_no_op(db_session, notifier):
    tracker = ProgressTracker(MODULE_ID, None, notifier)
    tracker.update_video_progress(db_session, 0, 30)

    assert tracker.get_video_progress(0) == 0
    assert notifier.notices == []
    assert db_session.query(UserProgress).count() == 0


def test_video_progress_keeps_completion_by_default(db_session, notifier, identity):
    tracker = ProgressTracker(MODULE_ID, identity, notifier, video_resets_completion=False)
    tracker.mark_lesson_complete(db_session, 0)
    tracker.update_video_progress(db_session, 0, 90)

    assert tracker.is_lesson_completed(0) is True
    row = _rows(db_session, identity.user_id)[0]
    assert row.completed is True
    assert row.video_progress_seconds == 90


def test_video_progress_can_reset_completion(db_session, notifier, identity):
    tracker = ProgressTracker(MODULE_ID, identity, notifier, video_resets_completion=True)
    tracker.mark_lesson_complete(db_session, 0)
    tracker.update_video_progress(db_session, 0, 90)

    assert tracker.is_lesson_completed(0) is False
    assert _rows(db_session, identity.user_id)[0].completed is False


def test_failed_completion_rolls_back_cache(db_session, notifier, identity, monkeypatch):
    tracker = ProgressTracker(MODULE_ID, identity, notifier, rollback_on_failure=True)
    monkeypatch.setattr(progress_service.crud_progress, "upsert", _boom)

    assert tracker.mark_lesson_complete(db_session, 0) is False
    assert tracker.is_lesson_completed(0) is False
    assert tracker.progress == []
    assert notifier.notices[-1].title == "Error"
    assert notifier.notices[-1].description == "Failed to save progress"


def test_failed_completion_can_keep_optimistic_cache(db_session, notifier, identity, monkeypatch):
    tracker = ProgressTracker(MODULE_ID, identity, notifier, rollback_on_failure=False)
    monkeypatch.setattr(progress_service.crud_progress, "upsert", _boom)

    assert tracker.mark_lesson_complete(db_session, 0) is False
    assert tracker.is_lesson_completed(0) is True


def test_failed_video_progress_is_dropped_without_notice(db_session, notifier, identity, monkeypatch):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    monkeypatch.setattr(progress_service.crud_progress, "upsert", _boom)

    tracker.update_video_progress(db_session, 0, 15)
    assert tracker.get_video_progress(0) == 0
    assert notifier.notices == []


@pytest.mark.parametrize("completed, total, percent, resume", [
    ([], 4, 0, 0),
    ([0, 1], 4, 50, 2),
    ([0, 2], 4, 50, 1),
    ([0, 1, 2, 3], 4, 100, 3),
    ([0], 0, 0, 0),
])
def test_percent_complete_and_resume_lesson(db_session, notifier, identity, completed, total, percent, resume):
    tracker = ProgressTracker(MODULE_ID, identity, notifier)
    for lesson_index in completed:
        tracker.mark_lesson_complete(db_session, lesson_index)

    assert tracker.get_completed_count() == len(completed)
    assert tracker.get_percent_complete(total) == percent
    assert tracker.get_resume_lesson(total) == resume
