import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("REDIS_URL", "")

import pytest
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from cyberlearn.core.config import settings
from cyberlearn.core.database import Base, get_db
from cyberlearn.core.cache import MemorySessionBackend, quiz_sessions
from cyberlearn.core.security import create_access_token
from cyberlearn.models import all as all_models  # noqa: F401
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.quiz import QuizQuestion
from cyberlearn.services.notification import Notifier
import main

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        # services commit their own writes, so wipe the tables rather than rolling back
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    quiz_sessions.backend = MemorySessionBackend()
    main.app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def notifier():
    return Notifier()

@pytest.fixture
def user_id():
    return str(uuid.uuid4())

@pytest.fixture
def identity(user_id):
    return Identity(user_id=user_id)

@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: str):
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _auth_headers

@pytest.fixture
def questions():
    return [
        QuizQuestion(
            question="Which attack tricks users into revealing credentials?",
            options=[
                {"label": "A", "text": "DDoS"},
                {"label": "B", "text": "Phishing"},
                {"label": "C", "text": "SQL injection"},
            ],
            correct_answer="B",
            explanation="Phishing relies on social engineering.",
        ),
        QuizQuestion(
            question="What does MFA stand for?",
            options=[
                {"label": "A", "text": "Multi-factor authentication"},
                {"label": "B", "text": "Managed firewall appliance"},
                {"label": "C", "text": "Malware forensics analysis"},
            ],
            correct_answer="A",
        ),
        QuizQuestion(
            question="Which port does HTTPS use by default?",
            options=[
                {"label": "A", "text": "80"},
                {"label": "B", "text": "22"},
                {"label": "C", "text": "443"},
            ],
            correct_answer="C",
        ),
    ]
