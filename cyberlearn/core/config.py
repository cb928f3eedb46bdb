from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "CyberLearn Progress"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Tokens are issued by the external auth provider, we only verify them
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./cyberlearn.db"
    TEST_DATABASE_URL: Optional[str] = None

    # Quiz session store
    REDIS_URL: Optional[str] = None
    QUIZ_SESSION_TTL: int = 60 * 60 * 2  # 2 hours

    # Learning rules
    QUIZ_PASS_THRESHOLD: float = 0.70
    QUIZ_HISTORY_LIMIT: int = 5
    LEADERBOARD_DEFAULT_LIMIT: int = 100
    LEADERBOARD_MAX_LIMIT: int = 500
    PROGRESS_ROLLBACK_ON_FAILURE: bool = True
    VIDEO_PROGRESS_RESETS_COMPLETION: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
