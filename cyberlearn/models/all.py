# Import every model so Base.metadata is complete for create_all and Alembic.
from cyberlearn.models.progress import UserProgress  # noqa: F401
from cyberlearn.models.quiz_attempt import QuizAttempt  # noqa: F401
from cyberlearn.models.engagement import UserEngagement  # noqa: F401
from cyberlearn.models.profile import Profile  # noqa: F401
