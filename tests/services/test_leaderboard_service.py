import uuid

from cyberlearn.schemas.identity import Identity
from cyberlearn.services.leaderboard import leaderboard_service
from tests.helpers.factories import create_engagement


def _uid():
    return str(uuid.uuid4())


def test_ranks_follow_points_and_are_contiguous(db_session):
    low = create_engagement(db_session, _uid(), 10)
    high = create_engagement(db_session, _uid(), 500)
    mid = create_engagement(db_session, _uid(), 120)

    entries = leaderboard_service.load_top(db_session)

    assert [e.user_id for e in entries] == [high.user_id, mid.user_id, low.user_id]
    assert [e.rank for e in entries] == [1, 2, 3]


def test_equal_points_keep_fetch_order(db_session):
    first = create_engagement(db_session, _uid(), 100)
    second = create_engagement(db_session, _uid(), 100)

    entries = leaderboard_service.load_top(db_session)
    assert [e.user_id for e in entries] == [first.user_id, second.user_id]
    assert [e.rank for e in entries] == [1, 2]


def test_profiles_are_joined_with_anonymous_fallback(db_session):
    named = create_engagement(
        db_session, _uid(), 50, display_name="Ada", avatar_url="https://cdn.example.com/ada.png",
        lessons_completed=4, quizzes_passed=2, average_quiz_score=87.5, streak_days=3,
    )
    create_engagement(db_session, _uid(), 40)

    entries = leaderboard_service.load_top(db_session)

    assert entries[0].display_name == "Ada"
    assert entries[0].avatar_url == "https://cdn.example.com/ada.png"
    assert entries[0].average_quiz_score == 87.5
    assert entries[0].lessons_completed == 4
    assert entries[0].user_id == named.user_id
    assert entries[1].display_name == "Anonymous"
    assert entries[1].avatar_url is None


def test_window_size_is_respected(db_session):
    for points in range(5):
        create_engagement(db_session, _uid(), points * 10)

    entries = leaderboard_service.load_top(db_session, 2)
    assert [e.total_points for e in entries] == [40, 30]
    assert leaderboard_service.load_top(db_session, 0) == []


def test_current_user_inside_window(db_session):
    me = create_engagement(db_session, _uid(), 300)
    create_engagement(db_session, _uid(), 400)
    entries = leaderboard_service.load_top(db_session)

    mine = leaderboard_service.load_current_user_rank(db_session, Identity(user_id=me.user_id), entries)
    assert mine.rank == 2


def test_current_user_outside_window_gets_true_rank(db_session):
    for points in (900, 800, 700):
        create_engagement(db_session, _uid(), points)
    me = create_engagement(db_session, _uid(), 650, display_name="Me")
    create_engagement(db_session, _uid(), 10)

    leaderboard = leaderboard_service.get_leaderboard(db_session, Identity(user_id=me.user_id), n=2)

    assert len(leaderboard.entries) == 2
    assert leaderboard.current_user.rank == 4
    assert leaderboard.current_user.display_name == "Me"


def test_current_user_absent_when_signed_out_or_unranked(db_session):
    create_engagement(db_session, _uid(), 100)
    entries = leaderboard_service.load_top(db_session)

    assert leaderboard_service.load_current_user_rank(db_session, None, entries) is None
    assert leaderboard_service.load_current_user_rank(db_session, Identity(user_id=_uid()), entries) is None
