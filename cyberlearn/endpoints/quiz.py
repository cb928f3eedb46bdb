import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from cyberlearn.core.cache import quiz_sessions
from cyberlearn.schemas.response import APIResponse
from cyberlearn.schemas.identity import Identity
from cyberlearn.schemas.progress import LessonCompletion
from cyberlearn.schemas.quiz import (
    AnswerSelection,
    QuizAttempt,
    QuizSessionCreate,
    QuizSessionRead,
    QuizSessionState,
)
from cyberlearn.services.notification import Notifier, get_notifier
from cyberlearn.services.progress import ProgressTracker
from cyberlearn.services.quiz import QuizAttemptRecorder
from cyberlearn.services.quiz_session import QuizSession
from cyberlearn.utils import deps

router = APIRouter()


async def _load_session(session_id: str, identity: Optional[Identity], notifier: Notifier) -> QuizSession:
    data = await quiz_sessions.load(session_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz session not found.")

    state = QuizSessionState.model_validate(data)
    if state.owner_id is not None and (identity is None or identity.user_id != state.owner_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz session not found.")
    return QuizSession.from_state(state, notifier)


async def _save_session(session_id: str, session: QuizSession) -> QuizSessionRead:
    await quiz_sessions.save(session_id, session.to_state().model_dump(mode="json"))
    return QuizSessionRead(
        session_id=session_id,
        module_id=session.recorder.module_id,
        lesson_index=session.recorder.lesson_index,
        view=session.view(),
    )


@router.post("/quizzes/sessions", response_model=APIResponse[QuizSessionRead], status_code=status.HTTP_201_CREATED)
async def start_quiz_session(
    *,
    db: Session = Depends(deps.get_db),
    session_in: QuizSessionCreate,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = QuizSession(
        session_in.module_id,
        session_in.lesson_index,
        session_in.questions,
        notifier,
        owner_id=identity.user_id if identity else None,
    )
    session.recorder.fetch_previous_attempts(db, identity)

    data = await _save_session(str(uuid.uuid4()), session)
    return APIResponse(message="Quiz session started", data=data, notices=notifier.notices)


@router.get("/quizzes/sessions/{session_id}", response_model=APIResponse[QuizSessionRead])
async def get_quiz_session(
    *,
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    return APIResponse(
        message="Quiz session retrieved",
        data=QuizSessionRead(
            session_id=session_id,
            module_id=session.recorder.module_id,
            lesson_index=session.recorder.lesson_index,
            view=session.view(),
        )
    )


@router.post("/quizzes/sessions/{session_id}/answer", response_model=APIResponse[QuizSessionRead])
async def select_answer(
    *,
    session_id: str,
    selection: AnswerSelection,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    is_correct = session.select_answer(selection.label)

    if is_correct is None:
        message = "Question already answered"
    else:
        message = "Correct answer" if is_correct else "Incorrect answer"
    data = await _save_session(session_id, session)
    return APIResponse(message=message, data=data, notices=notifier.notices)


@router.post("/quizzes/sessions/{session_id}/next", response_model=APIResponse[QuizSessionRead])
async def next_question(
    *,
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    session.next()
    data = await _save_session(session_id, session)
    return APIResponse(message="Moved to next question", data=data)


@router.post("/quizzes/sessions/{session_id}/previous", response_model=APIResponse[QuizSessionRead])
async def previous_question(
    *,
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    session.previous()
    data = await _save_session(session_id, session)
    return APIResponse(message="Moved to previous question", data=data)


@router.post("/quizzes/sessions/{session_id}/submit", response_model=APIResponse[QuizSessionRead])
async def submit_quiz(
    *,
    db: Session = Depends(deps.get_db),
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    success = session.submit(db, identity)
    data = await _save_session(session_id, session)
    return APIResponse(
        message="Quiz submitted successfully" if success else "Quiz was not submitted",
        data=data,
        notices=notifier.notices
    )


@router.post("/quizzes/sessions/{session_id}/retry", response_model=APIResponse[QuizSessionRead])
async def retry_quiz(
    *,
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    session.retry()
    data = await _save_session(session_id, session)
    return APIResponse(message="Quiz reset for another attempt", data=data)


@router.post("/quizzes/sessions/{session_id}/continue", response_model=APIResponse[LessonCompletion])
async def continue_after_quiz(
    *,
    db: Session = Depends(deps.get_db),
    session_id: str,
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    session = await _load_session(session_id, identity, notifier)
    lesson_index = session.recorder.lesson_index
    tracker = ProgressTracker(session.recorder.module_id, identity, notifier)
    tracker.load_for_module(db)

    success = session.continue_(lambda: tracker.mark_lesson_complete(db, lesson_index))
    if success:
        await quiz_sessions.discard(session_id)
    record = next((p for p in tracker.progress if p.lesson_index == lesson_index), None)
    return APIResponse(
        message="Lesson completed successfully" if success else "Lesson progress was not saved",
        data=LessonCompletion(success=success, record=record if success else None),
        notices=notifier.notices
    )


@router.get(
    "/modules/{module_id}/lessons/{lesson_index}/quiz-attempts",
    response_model=APIResponse[List[QuizAttempt]]
)
async def get_previous_attempts(
    *,
    db: Session = Depends(deps.get_db),
    module_id: str,
    lesson_index: int = Path(..., ge=0),
    identity: Optional[Identity] = Depends(deps.get_current_identity),
    notifier: Notifier = Depends(get_notifier)
):
    recorder = QuizAttemptRecorder(module_id, lesson_index, notifier)
    attempts = recorder.fetch_previous_attempts(db, identity)
    return APIResponse(message="Quiz attempts retrieved successfully", data=attempts)
