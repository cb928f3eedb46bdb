import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cyberlearn.core.config import settings
from cyberlearn.core.constants import ANONYMOUS_DISPLAY_NAME
from cyberlearn.crud.engagement import user_engagement as crud_engagement
from cyberlearn.crud.profile import profile as crud_profile
from cyberlearn.models.engagement import UserEngagement
from cyberlearn.models.profile import Profile
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.leaderboard import Leaderboard, LeaderboardEntry

logger = logging.getLogger(__name__)


class LeaderboardService:

    def _to_entry(self, engagement: UserEngagement, profile: Optional[Profile], rank: int) -> LeaderboardEntry:
        return LeaderboardEntry(
            user_id=engagement.user_id,
            total_points=engagement.total_points or 0,
            modules_completed=engagement.modules_completed or 0,
            lessons_completed=engagement.lessons_completed or 0,
            quizzes_passed=engagement.quizzes_passed or 0,
            average_quiz_score=float(engagement.average_quiz_score or 0),
            streak_days=engagement.streak_days or 0,
            display_name=(profile.display_name if profile else None) or ANONYMOUS_DISPLAY_NAME,
            avatar_url=(profile.avatar_url if profile else None) or None,
            rank=rank,
        )

    def load_top(self, db: Session, n: Optional[int] = None) -> List[LeaderboardEntry]:
        """Top `n` learners by points. Ranks follow fetch order, so equal points keep insertion order."""
        limit = settings.LEADERBOARD_DEFAULT_LIMIT if n is None else n
        if limit <= 0:
            return []

        try:
            rows = crud_engagement.get_top(db, limit=limit)
            profiles = crud_profile.get_by_user_ids(db, [row.user_id for row in rows])
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching leaderboard: {e}")
            return []

        return [
            self._to_entry(row, profiles.get(row.user_id), rank=index + 1)
            for index, row in enumerate(rows)
        ]

    def load_current_user_rank(
        self, db: Session, identity: Optional[Identity], entries: List[LeaderboardEntry]
    ) -> Optional[LeaderboardEntry]:
        if identity is None:
            return None

        in_window = next((e for e in entries if e.user_id == identity.user_id), None)
        if in_window:
            return in_window

        try:
            engagement = crud_engagement.get_by_user(db, user_id=identity.user_id)
            if not engagement:
                return None
            ahead = crud_engagement.count_with_more_points(db, total_points=engagement.total_points or 0)
            profiles = crud_profile.get_by_user_ids(db, [identity.user_id])
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching rank for user {identity.user_id}: {e}")
            return None

        return self._to_entry(engagement, profiles.get(identity.user_id), rank=ahead + 1)

    def get_leaderboard(self, db: Session, identity: Optional[Identity], n: Optional[int] = None) -> Leaderboard:
        entries = self.load_top(db, n)
        return Leaderboard(entries=entries, current_user=self.load_current_user_rank(db, identity, entries))


leaderboard_service = LeaderboardService()
