"""
FastAPI Backend for the Adaptive Assessment Engine

Endpoints:
    POST   /sessions                 - Start a new session
    GET    /sessions/{id}            - Current session state
    POST   /sessions/{id}/answer     - Submit an answer
    POST   /sessions/{id}/skip       - Skip the current question
    POST   /sessions/{id}/advance    - Show the next question (manual advance)
    POST   /sessions/{id}/reset      - Start the session over
    GET    /sessions/{id}/results    - Results of a completed session
    DELETE /sessions/{id}            - Drop a session
"""

import asyncio
import uuid
from typing import Dict, List, Optional

import redis
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from assessment import (
    ConceptMasteryTracker,
    QuestionBank,
    QuestionBankError,
    SessionConfig,
    SessionController,
    SessionPhase,
    SessionResults,
)
from config import configure_logging, question_bank_path, session_config_from_env
from redis_store import RedisStore

# ==================== Initialize ====================

configure_logging()

# Read once so a bad ADAPTIVE_* value stops the server at startup
session_defaults = session_config_from_env()

app = FastAPI(
    title="Adaptive Assessment API",
    description="Adaptive quizzes with difficulty, skill and concept mastery tracking",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = RedisStore()
mastery_tracker = ConceptMasteryTracker()

# One controller per session id
sessions: Dict[str, SessionController] = {}


# ==================== Request/Response Models ====================

class OptionPayload(BaseModel):
    id: str
    text: str


class QuestionPayload(BaseModel):
    id: str
    prompt: str
    options: List[OptionPayload]
    correct_option_id: Optional[str] = None
    difficulty: float = 0.5
    concept: Optional[str] = None
    tags: List[str] = []
    explanation: Optional[str] = None


class StartSessionRequest(BaseModel):
    session_id: Optional[str] = None  # Auto-generate if not provided
    questions: Optional[List[QuestionPayload]] = None  # Configured bank file if omitted
    initial_difficulty: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_questions: Optional[int] = Field(default=None, ge=0)
    enable_spaced_repetition: Optional[bool] = None
    auto_advance: bool = True


class AnswerRequest(BaseModel):
    option_id: str
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    time_spent: Optional[float] = Field(default=None, ge=0.0)


class AnswerResponse(BaseModel):
    is_correct: bool
    correct_option_id: Optional[str] = None
    explanation: Optional[str] = None
    session: dict


# ==================== Helper Functions ====================

def get_controller(session_id: str) -> SessionController:
    controller = sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found. Start a new session first.")
    return controller


def build_config(request: StartSessionRequest) -> SessionConfig:
    """Environment defaults, overridden by whatever the request sets."""
    defaults = session_defaults
    return SessionConfig(
        initial_difficulty=(request.initial_difficulty
                            if request.initial_difficulty is not None
                            else defaults.initial_difficulty),
        max_questions=(request.max_questions
                       if request.max_questions is not None
                       else defaults.max_questions),
        enable_spaced_repetition=(request.enable_spaced_repetition
                                  if request.enable_spaced_repetition is not None
                                  else defaults.enable_spaced_repetition),
    )


def make_fetcher(request: StartSessionRequest):
    """Async question source for SessionController.load()."""
    async def fetch() -> QuestionBank:
        if request.questions is not None:
            bank = QuestionBank.from_dicts([q.model_dump() for q in request.questions])
        else:
            bank = await asyncio.to_thread(QuestionBank.from_file, question_bank_path())

        for q in bank.malformed():
            logger.warning(f"Question {q.id} has no correct option; answers will be graded incorrect")
        return bank

    return fetch


def make_results_saver(session_id: str):
    """Completion callback: persist results, never break the quiz."""
    def save(results: SessionResults):
        try:
            store.save_results(session_id, results)
        except redis.RedisError as e:
            logger.error(f"Could not save results for session {session_id}: {e}")

    return save


def load_stored_results(session_id: str) -> Optional[dict]:
    """
    Results persisted by an earlier completion, in the same shape as
    SessionResults.to_dict(). None when nothing is stored.
    """
    try:
        stored = store.get_session(session_id)
    except redis.RedisError as e:
        logger.error(f"Could not read stored results for session {session_id}: {e}")
        raise HTTPException(status_code=503, detail="Result store unavailable")

    if stored is None:
        return None

    state = stored["state"]
    mastery = stored["mastery"]
    return {
        "score": state["score"],
        "final_difficulty": state["final_difficulty"],
        "skill": state["skill"],
        "records": stored["answers"],
        "mastery": mastery,
        "summary": stored["summary"],
        "weak_concepts": mastery_tracker.weak_concepts(mastery),
        "mastered_concepts": mastery_tracker.mastered_concepts(mastery),
    }


# ==================== Endpoints ====================

@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Adaptive Assessment API is running"}


@app.post("/sessions")
async def start_session(request: StartSessionRequest):
    """
    Start a new assessment session.

    Returns the session state with the first question.
    """
    session_id = request.session_id or str(uuid.uuid4())[:8]

    controller = SessionController(
        config=build_config(request),
        on_complete=make_results_saver(session_id),
        auto_advance=request.auto_advance,
    )

    try:
        await controller.load(make_fetcher(request))
    except QuestionBankError as e:
        raise HTTPException(status_code=422, detail=str(e))

    sessions[session_id] = controller

    return {"session_id": session_id, "session": controller.snapshot()}


@app.get("/sessions/{session_id}")
def get_session(session_id: str):
    controller = get_controller(session_id)
    return {"session_id": session_id, "session": controller.snapshot()}


@app.post("/sessions/{session_id}/answer", response_model=AnswerResponse)
def submit_answer(session_id: str, request: AnswerRequest):
    """
    Grade an answer for the current question.

    Duplicate submissions are rejected with 409 so the client knows
    nothing changed.
    """
    controller = get_controller(session_id)
    question = controller.current_question

    if controller.phase != SessionPhase.ACTIVE or question is None:
        raise HTTPException(status_code=409, detail="Session is not accepting answers")

    is_correct = controller.submit_answer(
        request.option_id,
        confidence=request.confidence,
        time_spent=request.time_spent,
    )
    if is_correct is None:
        raise HTTPException(status_code=409, detail="Question already answered")

    return AnswerResponse(
        is_correct=is_correct,
        correct_option_id=question.correct_option_id,
        explanation=question.explanation,
        session=controller.snapshot()
    )


@app.post("/sessions/{session_id}/skip")
def skip_question(session_id: str):
    controller = get_controller(session_id)
    if not controller.skip_question():
        raise HTTPException(status_code=409, detail="Nothing to skip")
    return {"session_id": session_id, "session": controller.snapshot()}


@app.post("/sessions/{session_id}/advance")
def advance(session_id: str):
    controller = get_controller(session_id)
    moved = controller.advance()
    return {"session_id": session_id, "advanced": moved, "session": controller.snapshot()}


@app.post("/sessions/{session_id}/reset")
def reset_session(session_id: str):
    controller = get_controller(session_id)
    controller.reset()
    return {"session_id": session_id, "session": controller.snapshot()}


@app.get("/sessions/{session_id}/results")
def get_results(session_id: str):
    """
    Results of a completed session.

    Falls back to the result store when the session is no longer held in
    memory, e.g. after a server restart.
    """
    controller = sessions.get(session_id)
    if controller is None:
        stored = load_stored_results(session_id)
        if stored is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return {"session_id": session_id, "results": stored}

    if controller.results is None:
        raise HTTPException(status_code=409, detail="Session is not complete")
    return {"session_id": session_id, "results": controller.results.to_dict()}


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    """
    Delete a session and its stored results.
    """
    sessions.pop(session_id, None)
    try:
        store.delete_session(session_id)
    except redis.RedisError as e:
        logger.error(f"Could not delete stored results for session {session_id}: {e}")
    return {"status": "deleted", "session_id": session_id}


# ==================== Run Server ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
