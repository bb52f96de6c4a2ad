import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from quizgen.core.config import settings
from quizgen.core.exceptions import ConfigurationMissingError
from quizgen.core.extractor import StructuredExtractor
from quizgen.core.llm import create_generator
from quizgen.core.logging_config import request_id_var, setup_logging
from quizgen.routers import quiz
from quizgen.services.quiz_service import QuizService
from quizgen.storage.game_store import create_game_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.ENVIRONMENT, settings.LOG_LEVEL, settings.LOG_DIR)
    logger.info(f"🚀 Starting {settings.APP_NAME}...")

    app.state.quiz_service = None
    app.state.startup_error = None
    try:
        generator = create_generator(settings)
    except ConfigurationMissingError as e:
        # Surface on every request instead of failing inside the retry loop
        logger.error(f"❌ LLM backend not configured: {e}")
        app.state.startup_error = str(e)
    else:
        app.state.quiz_service = QuizService(
            extractor=StructuredExtractor(generator, default_model=settings.LLM_MODEL),
            store=create_game_store(settings),
        )

    yield
    # Shutdown
    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
async def health_check():
    health = {"status": "ok", "version": settings.APP_VERSION}

    service = getattr(app.state, "quiz_service", None)
    store_health = getattr(getattr(service, "store", None), "health_check", None)
    if store_health is not None:
        health["store"] = store_health()

    startup_error = getattr(app.state, "startup_error", None)
    if startup_error:
        health["llm"] = {"status": "unconfigured", "error": startup_error}

    return health


app.include_router(quiz.router)
