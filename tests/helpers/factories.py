from typing import Optional
from sqlalchemy.orm import Session

from cyberlearn.models.engagement import UserEngagement
from cyberlearn.models.profile import Profile


def create_engagement(
    db: Session,
    user_id: str,
    total_points: int,
    *,
    display_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    **stats,
) -> UserEngagement:
    engagement = UserEngagement(
        user_id=user_id,
        total_points=total_points,
        modules_completed=stats.get("modules_completed", 0),
        lessons_completed=stats.get("lessons_completed", 0),
        quizzes_passed=stats.get("quizzes_passed", 0),
        average_quiz_score=stats.get("average_quiz_score", 0.0),
        streak_days=stats.get("streak_days", 0),
    )
    db.add(engagement)
    if display_name is not None or avatar_url is not None:
        db.add(Profile(user_id=user_id, display_name=display_name, avatar_url=avatar_url))
    db.commit()
    db.refresh(engagement)
    return engagement
