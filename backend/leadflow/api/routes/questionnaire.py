"""Questionnaire API routes — portal session lifecycle endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from leadflow.core.auth import PortalUser, require_auth
from leadflow.core.exceptions import (
    AnswerValidationError,
    PersistenceError,
    QuestionNotInFlowError,
    SessionCompletedError,
    SessionNotCompletedError,
    SessionNotFoundError,
)
from leadflow.db.base import get_session_factory
from leadflow.domain.catalog import get_default_catalog
from leadflow.schemas.questionnaire import (
    AnswerRequest,
    CatalogResponse,
    QuestionnaireProgressResponse,
    QuestionnaireResultsResponse,
)
from leadflow.services.questionnaire_service import QuestionnaireProgress, QuestionnaireService
from leadflow.store.session_store import SessionStore
from leadflow.store.session_store_sql import SqlSessionStore

router = APIRouter()


def get_session_store() -> SessionStore:
    """Dependency that provides the SessionStore.

    Override this dependency in tests via app.dependency_overrides.
    """
    return SqlSessionStore(get_session_factory())


def _progress_response(progress: QuestionnaireProgress) -> QuestionnaireProgressResponse:
    session = progress.session
    return QuestionnaireProgressResponse(
        session_id=session.id,
        status=session.status,
        version=session.version,
        current_question=progress.current_question,
        question_number=progress.question_number,
        total_questions=len(progress.flow),
        progress_percent=progress.progress_percent,
        answers=progress.answers,
        completed=progress.completed,
    )


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog():
    """Return the versioned question catalog in default order."""
    catalog = get_default_catalog()
    return CatalogResponse(version=catalog.version, questions=catalog.get_all_questions())


@router.post("/session", response_model=QuestionnaireProgressResponse)
async def start_or_resume_session(
    user: PortalUser = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    """Start the questionnaire on first visit, otherwise resume it.

    A completed session comes back with completed=true and no current
    question; the client should show the results view.

    Raises:
        HTTPException(503): If the session store is unavailable
    """
    service = QuestionnaireService(store)
    try:
        progress = await service.start_or_resume(user.user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return _progress_response(progress)


@router.post("/answer", response_model=QuestionnaireProgressResponse)
async def submit_answer(
    request: AnswerRequest,
    user: PortalUser = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    """Submit an answer and receive the next question (or completion).

    Raises:
        HTTPException(404): If the user has not started the questionnaire
        HTTPException(409): If the questionnaire is already completed
        HTTPException(400): If the question is not part of the current flow
        HTTPException(422): If the answer fails validation
        HTTPException(503): If the session store is unavailable
    """
    service = QuestionnaireService(store)
    try:
        progress = await service.submit_answer(
            user.user_id, request.question_id, request.value, time_spent=request.time_spent
        )
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Questionnaire not started") from exc
    except SessionCompletedError as exc:
        raise HTTPException(status_code=409, detail="Questionnaire already completed") from exc
    except QuestionNotInFlowError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AnswerValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"question_id": exc.question_id, "message": exc.message},
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return _progress_response(progress)


@router.get("/results", response_model=QuestionnaireResultsResponse)
async def get_results(
    user: PortalUser = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    """Return the lead score and recommendations for a completed questionnaire.

    Raises:
        HTTPException(404): If the user has not started the questionnaire
        HTTPException(409): If the questionnaire is not completed yet
        HTTPException(503): If the session store is unavailable
    """
    service = QuestionnaireService(store)
    try:
        results = await service.get_results(user.user_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Questionnaire not started") from exc
    except SessionNotCompletedError as exc:
        raise HTTPException(status_code=409, detail="Questionnaire not completed") from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return QuestionnaireResultsResponse(
        session_id=results.session.id,
        completed_at=results.session.completed_at,
        score=results.score,
        temperature_emoji=results.temperature_emoji,
        interpretation=results.interpretation,
        follow_up=results.follow_up,
    )
