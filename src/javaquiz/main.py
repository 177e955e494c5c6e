import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

import uvicorn
from fastapi import (
    Cookie,
    Depends,
    FastAPI,
    Form,
    Response,
)
from fastapi.responses import JSONResponse, RedirectResponse
from redis import Redis

from .catalog import QuestionCatalog
from .config import settings
from .database import init_db
from .log_handler import SQLiteHandler
from .models import Level, QuizState, SessionData
from .progress import (
    FileProgressStorage,
    ProgressStore,
    RedisProgressStorage,
)
from .quiz import QuizEngine
from .redis_session import get_redis, session_key
from .simulator import simulate

# --- Logging Setup ---
logger = logging.getLogger("javaquiz")
logger.setLevel(logging.INFO)

if settings.LOG_TO_DB:
    logger.addHandler(SQLiteHandler())
else:
    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.LOG_TO_DB:
        init_db()
    catalog.load_all()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

catalog = QuestionCatalog(settings.QUESTIONS_DIR)


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> Optional[str]:
    return session_id


def get_progress_store(redis_client: Redis = Depends(get_redis)) -> ProgressStore:
    if settings.PROGRESS_BACKEND == "file":
        return ProgressStore(FileProgressStorage(settings.PROGRESS_FILE))
    return ProgressStore(RedisProgressStorage(redis_client, settings.PROGRESS_KEY))


def get_active_session(
    session_id: Optional[str] = Depends(get_session_id),
    redis_client: Redis = Depends(get_redis),
) -> Optional[SessionData]:
    if not session_id:
        return None

    session_data = redis_client.get(session_key(session_id))
    if not session_data:
        return None

    session = SessionData.model_validate_json(session_data)

    if datetime.now() - session.created_at > timedelta(
        minutes=settings.SESSION_TIMEOUT_MINUTES
    ):
        redis_client.delete(session_key(session_id))
        return None
    return session


def store_session(redis_client: Redis, session_id: str, session: SessionData):
    redis_client.set(
        session_key(session_id),
        session.model_dump_json(),
        ex=timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES),
    )


def bind_engine(
    session_id: str,
    session: SessionData,
    store: ProgressStore,
    redis_client: Redis,
) -> QuizEngine:
    """Rebuilds the engine for a stored session and writes every change back."""

    def persist(state):
        session.state = state
        store_session(redis_client, session_id, session)

    return QuizEngine(store, state=session.state, listeners=[persist])


def quiz_payload(engine: QuizEngine) -> Dict[str, Any]:
    current = engine.current_question
    return {
        "quiz_id": engine.quiz_id,
        "phase": engine.phase.value,
        "current_index": engine.state.current_index,
        "total_questions": engine.total,
        "progress": engine.progress,
        "score": engine.state.score,
        "question": (
            {
                "id": current.id,
                "text": current.text,
                "options": current.options,
            }
            if current is not None
            else None
        ),
        "selected_answer": engine.state.selected_answer,
        "explanation_shown": engine.state.explanation_shown,
        "correct_answer": (
            current.correct_answer
            if current is not None and engine.state.explanation_shown
            else None
        ),
        "explanation": (
            current.explanation
            if current is not None and engine.state.explanation_shown
            else None
        ),
        "completed": engine.state.completed,
    }


def invalid_session() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


# --- Routes ---
@app.get("/api/topics")
async def get_topics():
    return catalog.get_topics()


@app.post("/start", response_class=RedirectResponse)
def start_quiz_session(
    level: str = Form(...),
    topic: str = Form(...),
    store: ProgressStore = Depends(get_progress_store),
    redis_client: Redis = Depends(get_redis),
):
    try:
        quiz_level = Level(level)
    except ValueError:
        return JSONResponse({"error": f"Unknown level: {level}"}, status_code=400)

    questions = catalog.query(quiz_level, topic)

    new_id = str(uuid.uuid4())
    session = SessionData(
        state=QuizState(),
        created_at=datetime.now(),
        level=quiz_level,
        topic=topic,
    )
    engine = bind_engine(new_id, session, store, redis_client)
    engine.start(questions)

    logger.info(
        f"New session: {new_id} [Level: {session.level.value}, "
        f"Topic: {session.topic}, Questions: {engine.total}]"
    )

    redirect = RedirectResponse(url="/api/quiz", status_code=302)
    redirect.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return redirect


@app.get("/api/quiz")
def get_quiz_state(
    session: SessionData = Depends(get_active_session),
    store: ProgressStore = Depends(get_progress_store),
):
    if not session:
        return invalid_session()
    return quiz_payload(QuizEngine(store, state=session.state))


@app.post("/select_answer")
def select_answer(
    answer: str = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
    session: SessionData = Depends(get_active_session),
    store: ProgressStore = Depends(get_progress_store),
    redis_client: Redis = Depends(get_redis),
):
    if not session:
        return invalid_session()
    engine = bind_engine(session_id, session, store, redis_client)
    engine.select_answer(answer)
    return quiz_payload(engine)


@app.post("/advance")
def advance(
    session_id: Optional[str] = Depends(get_session_id),
    session: SessionData = Depends(get_active_session),
    store: ProgressStore = Depends(get_progress_store),
    redis_client: Redis = Depends(get_redis),
):
    if not session:
        return invalid_session()
    engine = bind_engine(session_id, session, store, redis_client)
    engine.advance()
    return quiz_payload(engine)


@app.post("/retake")
def retake(
    session_id: Optional[str] = Depends(get_session_id),
    session: SessionData = Depends(get_active_session),
    store: ProgressStore = Depends(get_progress_store),
    redis_client: Redis = Depends(get_redis),
):
    if not session:
        return invalid_session()
    engine = bind_engine(session_id, session, store, redis_client)
    engine.retake()
    logger.info(f"Retake: {session_id} [Quiz: {engine.quiz_id}]")
    return quiz_payload(engine)


@app.get("/api/result")
def get_result_data(
    session: SessionData = Depends(get_active_session),
    store: ProgressStore = Depends(get_progress_store),
):
    if not session:
        return invalid_session()

    engine = QuizEngine(store, state=session.state)
    return {
        "quiz_id": engine.quiz_id,
        "completed": engine.state.completed,
        "correct_count": engine.state.score,
        "total_questions": engine.total,
        "score_percentage": engine.percentage,
        "saved_score": store.score_for(engine.quiz_id),
        "answers": engine.state.answers,
    }


@app.get("/api/progress")
def get_progress(store: ProgressStore = Depends(get_progress_store)):
    return store.load()


@app.post("/simulate")
async def run_simulation(source: str = Form(...)):
    return {"output": simulate(source)}


@app.post("/api/reset")
def reset_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    redis_client: Redis = Depends(get_redis),
):
    if session_id:
        redis_client.delete(session_key(session_id))
        logger.info(f"Reset session: {session_id}")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


if __name__ == "__main__":
    uvicorn.run("javaquiz.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
