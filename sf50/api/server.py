"""
FastAPI server for the SF-50 NOA assistant.

Provides the stateless recommendation endpoints used by the web UI and
session endpoints that run the clarification dialogue server-side.

Usage:
    python -m sf50.api.server
    # or
    uvicorn sf50.api.server:app --reload --port 8000
"""
import threading
import traceback
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv
load_dotenv()

from sf50 import __version__
from sf50.api.models import (
    AnswerRequest,
    ChatNOARequest,
    HealthResponse,
    RecommendationResponse,
    RecommendNOARequest,
    ResetRequest,
    ResetResponse,
    SessionResponse,
    StartSessionRequest,
    TurnResponse,
)
from sf50.core.config import get_config
from sf50.core.controller import DialogueController, DialogueCursor, TurnResult
from sf50.core.errors import DialogueStateError, EmptyModelOutputError, ModelInvocationError, SessionBusyError
from sf50.llm import ModelClient, create_model_client
from sf50.utils.logger import get_logger, session_context

logger = get_logger("api.server")


# Initialize FastAPI app
app = FastAPI(
    title="SF-50 NOA Assistant API",
    description="Nature of Action recommendations with a clarification dialogue",
    version=__version__,
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class SessionEntry:
    """Stored dialogue cursor plus a lock allowing one in-flight turn."""
    cursor: DialogueCursor = field(default_factory=DialogueCursor)
    lock: threading.Lock = field(default_factory=threading.Lock)


# Session storage: session_id -> SessionEntry (in memory only, never persisted)
sessions: Dict[str, SessionEntry] = {}
_sessions_lock = threading.Lock()


def get_model_client(request: Request) -> ModelClient:
    """Model client owned by the app, built on first use."""
    client = getattr(request.app.state, "model_client", None)
    if client is None:
        client = create_model_client(get_config())
        request.app.state.model_client = client
    return client


def get_controller(client: ModelClient = Depends(get_model_client)) -> DialogueController:
    return DialogueController(client, get_config())


@contextmanager
def session_turn(session_id: str, create: bool = False) -> Iterator[Tuple[SessionEntry, bool]]:
    """
    Hold a session's lock for one turn; a concurrent turn gets 409.

    Yields the entry and whether this call registered it.
    """
    created = False
    with _sessions_lock:
        entry = sessions.get(session_id)
        if entry is None:
            if not create:
                raise HTTPException(status_code=404, detail="Session not found")
            entry = sessions[session_id] = SessionEntry()
            created = True

    if not entry.lock.acquire(blocking=False):
        raise to_http_exception(SessionBusyError("A request for this session is already in progress"), "Session busy")
    try:
        yield entry, created
    finally:
        entry.lock.release()


def store_cursor(session_id: str, entry: SessionEntry, cursor: DialogueCursor) -> bool:
    """Save a finished turn unless the session was reset or deleted while it ran."""
    with _sessions_lock:
        if sessions.get(session_id) is not entry:
            logger.info(f"Session {session_id} was replaced during the turn; result not stored")
            return False
        entry.cursor = cursor
        return True


def discard_session(session_id: str, entry: SessionEntry) -> None:
    """Drop an entry registered by a turn that failed."""
    with _sessions_lock:
        if sessions.get(session_id) is entry:
            del sessions[session_id]


def to_http_exception(e: Exception, default_message: str) -> HTTPException:
    """Map core errors to HTTP errors."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, EmptyModelOutputError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, ModelInvocationError):
        return HTTPException(status_code=500, detail={"error": e.user_message, "message": e.detail})
    if isinstance(e, (DialogueStateError, SessionBusyError)):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"Unexpected error: {e}\n{traceback.format_exc()}")
    return HTTPException(status_code=500, detail={"error": default_message, "message": str(e)})


def _turn_response(session_id: str, result: TurnResult) -> TurnResponse:
    return TurnResponse(
        session_id=session_id,
        recommendation=result.recommendation,
        next_question=result.next_question,
        state=result.cursor.state.value,
        raw_response=result.raw_response,
    )


# API Endpoints

@app.get("/", response_model=HealthResponse)
def root():
    """Health check endpoint."""
    config = get_config()
    return HealthResponse(
        status="online",
        service="SF-50 NOA Assistant API",
        version=__version__,
        config={
            "provider": config.provider,
            "model": config.model,
            "max_tokens": config.max_tokens,
        }
    )


@app.post("/recommend-noa", response_model=RecommendationResponse)
def recommend_noa(request: RecommendNOARequest, controller: DialogueController = Depends(get_controller)):
    """First-pass recommendation for a scenario."""
    try:
        recommendation, raw = controller.recommend(request.scenario)
    except Exception as e:
        raise to_http_exception(e, "Failed to get recommendation")
    return RecommendationResponse(recommendation=recommendation, raw_response=raw)


@app.post("/chat-noa", response_model=RecommendationResponse)
def chat_noa(request: ChatNOARequest, controller: DialogueController = Depends(get_controller)):
    """
    Updated recommendation from the original scenario and the full history.

    Stateless: the client keeps the history and question cursor.
    """
    try:
        recommendation, raw = controller.refine(
            request.original_scenario,
            [message.to_turn() for message in request.conversation_history],
        )
    except Exception as e:
        raise to_http_exception(e, "Failed to get updated recommendation")
    return RecommendationResponse(recommendation=recommendation, raw_response=raw)


@app.post("/session/start", response_model=TurnResponse)
def start_session(request: StartSessionRequest, controller: DialogueController = Depends(get_controller)):
    """
    Submit a scenario to a dialogue session.

    A new scenario on an existing session replaces its dialogue entirely.
    """
    session_id = request.session_id or str(uuid.uuid4())
    with session_context(session_id), session_turn(session_id, create=True) as (entry, created):
        try:
            result = controller.start(request.scenario)
        except Exception as e:
            if created:
                discard_session(session_id, entry)
            raise to_http_exception(e, "Failed to get recommendation")
        store_cursor(session_id, entry, result.cursor)

        if created:
            logger.info("Created new session")
        logger.info(f"Scenario submitted: state={result.cursor.state.value}")
    return _turn_response(session_id, result)


@app.post("/session/{session_id}/answer", response_model=TurnResponse)
def answer_question(
    session_id: str,
    request: AnswerRequest,
    controller: DialogueController = Depends(get_controller),
):
    """Answer the current clarification question."""
    with session_context(session_id), session_turn(session_id) as (entry, _):
        try:
            result = controller.answer(entry.cursor, request.message)
        except Exception as e:
            raise to_http_exception(e, "Failed to get updated recommendation")
        store_cursor(session_id, entry, result.cursor)

        logger.info(f"Answer submitted: state={result.cursor.state.value}, turns={len(result.cursor.history)}")
    return _turn_response(session_id, result)


@app.get("/session/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    """Get current session state."""
    entry = sessions.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")

    cursor = entry.cursor
    return SessionResponse(
        session_id=session_id,
        state=cursor.state.value,
        question_index=cursor.index,
        questions_remaining=cursor.questions_remaining,
        original_questions=list(cursor.original_questions),
        history_length=len(cursor.history),
        recommendation=cursor.recommendation,
    )


@app.post("/session/reset", response_model=ResetResponse)
def reset_session(request: ResetRequest, controller: DialogueController = Depends(get_controller)):
    """
    Reset session or create new one.

    Never waits on an in-flight turn: the old entry is replaced, so a turn
    that finishes afterwards cannot restore the discarded dialogue.
    """
    session_id = request.session_id or str(uuid.uuid4())
    with _sessions_lock:
        sessions[session_id] = SessionEntry(cursor=controller.reset())
    logger.info(f"Reset session: {session_id}")

    return ResetResponse(session_id=session_id, status="reset")


@app.delete("/session/{session_id}")
def delete_session(session_id: str):
    """Delete a session."""
    with _sessions_lock:
        entry = sessions.pop(session_id, None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")
    logger.info(f"Deleted session: {session_id}")
    return {"status": "deleted", "session_id": session_id}


@app.get("/sessions")
def list_sessions():
    """List all active sessions."""
    return {
        "active_sessions": len(sessions),
        "session_ids": list(sessions.keys())
    }


if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("SF-50 NOA Assistant API Server")
    print("=" * 60)
    print("API Documentation: http://localhost:8000/docs")
    print("")
    print("Environment variables:")
    print("  SF50_PROVIDER=openai|bedrock - Model provider")
    print("  SF50_MODEL / BEDROCK_MODEL_ID - Model identifier")
    print("  LOG_LEVEL=DEBUG               - Log unmatched reply sections")
    print("=" * 60)

    uvicorn.run(app, host="0.0.0.0", port=8000)
