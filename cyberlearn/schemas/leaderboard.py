from pydantic import BaseModel, ConfigDict
from typing import Optional, List


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    total_points: int = 0
    modules_completed: int = 0
    lessons_completed: int = 0
    quizzes_passed: int = 0
    average_quiz_score: float = 0.0
    streak_days: int = 0
    display_name: str
    avatar_url: Optional[str] = None
    rank: int


class Leaderboard(BaseModel):
    entries: List[LeaderboardEntry]
    current_user: Optional[LeaderboardEntry] = None
