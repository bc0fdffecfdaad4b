"""
Crypto Tutor

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cryptotutor.ai.quiz_generator import QuizGenerator
from cryptotutor.ai.tutor import AITutor
from cryptotutor.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from cryptotutor.api.v1 import router as api_v1_router
from cryptotutor.config import ai_key_configured, get_settings
from cryptotutor.database import async_session_maker, close_db, init_db, ping_db
from cryptotutor.engines.content.provider import DatabaseContentProvider
from cryptotutor.engines.content.sinks import BackgroundProgressSink
from cryptotutor.engines.progression.registry import SessionRegistry
from cryptotutor.logging_config import configure_logging, get_logger
from cryptotutor.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:5173",  # Vite
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def init_services(app: FastAPI) -> None:
    """Attach the app-scoped services routes depend on."""
    quiz_generator = QuizGenerator(settings)
    app.state.quiz_generator = quiz_generator
    app.state.tutor = AITutor(settings)
    app.state.content_provider = DatabaseContentProvider(async_session_maker, quiz_generator)
    app.state.progress_sink = BackgroundProgressSink(async_session_maker)
    app.state.sessions = SessionRegistry(max_idle=timedelta(minutes=settings.session_idle_minutes))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    if not ai_key_configured(settings):
        logger.warning("OPENAI_API_KEY not set; AI quizzes fall back and the tutor replies with stubs")

    yield

    live = len(app.state.sessions)
    app.state.sessions.close_all()
    logger.info("Closed %d lesson sessions", live)
    pending = app.state.progress_sink.pending
    await app.state.progress_sink.drain()
    logger.info("Flushed %d pending progress writes", pending)
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.project_name,
    description="""
    Crypto Tutor

    Lesson progression for cryptocurrency courses.

    ## Features

    - **Lessons**: topics and subtopics with resources, annotated with learner progress
    - **Lesson Sessions**: learning, tutor chat, practice quiz, challenge quiz, final test
    - **Progress**: idempotent per-subtopic completion and quiz scores
    - **AI Tutor**: generated quizzes, chat, simplified explanations, feedback
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# At import rather than in lifespan: in-process clients (ASGITransport) skip lifespan
init_services(app)

# Added last = outermost, so error responses get CORS headers too
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    request: Request,
    status_code: int,
    content: dict,
    include_request_id: bool = False,
) -> JSONResponse:
    req_id: Optional[str] = getattr(request.state, "request_id", None)
    headers = {REQUEST_ID_HEADER: req_id} if req_id else {}
    if include_request_id and req_id:
        content["request_id"] = req_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(
        request,
        exc.status_code,
        {"detail": exc.detail},
        include_request_id=exc.status_code >= 500,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with one entry per invalid field."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"detail": "Validation error", "errors": errors},
        include_request_id=True,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.debug:
        content = {"detail": str(exc), "type": type(exc).__name__}
    else:
        content = {"detail": "Internal server error"}
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        content,
        include_request_id=True,
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Liveness plus database reachability and whether an AI key is set."""
    db_ok = await ping_db()
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        version=settings.version,
        database="connected" if db_ok else "unavailable",
        ai_configured=ai_key_configured(settings),
    )


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {"v1": settings.api_v1_prefix},
        "live_sessions": len(app.state.sessions),
    }


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cryptotutor.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
