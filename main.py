from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from cyberlearn.core.config import settings
from cyberlearn.core.database import Base, engine
from cyberlearn.core.logging import configure_logging
from cyberlearn.endpoints import progress, quiz, leaderboard
from cyberlearn.middleware.exceptions import (
    global_exception_handler,
    quiz_session_exception_handler,
    validation_exception_handler,
)
from cyberlearn.middleware.logging import RequestLoggingMiddleware
from cyberlearn.models import all as all_models  # noqa: F401
from cyberlearn.schemas.response import APIResponse
from cyberlearn.services.quiz_session import QuizSessionError

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(QuizSessionError, quiz_session_exception_handler)

app.include_router(progress.router, tags=["Progress"])
app.include_router(quiz.router, tags=["Quizzes"])
app.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])

@app.get("/health", response_model=APIResponse[dict], tags=["Health"])
async def health():
    return APIResponse(message="ok", data={"version": settings.VERSION})

@app.on_event("startup")
async def startup_event():
    # Alembic owns the schema in deployed environments; this keeps local sqlite usable out of the box.
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
