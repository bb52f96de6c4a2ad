import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from quizgen.core.config import settings
from quizgen.core.exceptions import (
    ConfigurationMissingError,
    ExtractionExhaustedError,
    MalformedRequestError,
    StorageError,
)
from quizgen.schemas import GameCreatedResponse, GameResponse, QuestionsResponse, QuizRequest
from quizgen.services.quiz_service import QuizService

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["quiz"])

GENERATION_FAILED_MESSAGE = "AI generation failed. Check server logs."


def get_quiz_service(request: Request) -> QuizService:
    """Quiz service built at startup, or a 500 explaining why it is missing."""
    service = getattr(request.app.state, "quiz_service", None)
    if service is None:
        startup_error = getattr(request.app.state, "startup_error", None)
        raise HTTPException(
            status_code=500,
            detail=startup_error or "Services not initialized"
        )
    return service


def _check_amount(amount: int) -> None:
    limit = settings.MAX_QUESTIONS_PER_REQUEST
    if amount > limit:
        raise HTTPException(
            status_code=400,
            detail=f"You can request up to {limit} questions at a time."
        )


@router.post("/questions", response_model=QuestionsResponse)
async def generate_questions(request: QuizRequest, service: QuizService = Depends(get_quiz_service)):
    """
    Generate quiz questions for a topic.
    Generation failures return an empty list with an error message, not a 5xx.
    """
    _check_amount(request.amount)

    try:
        questions = await service.generate_questions(request)
    except ExtractionExhaustedError as e:
        logger.error(f"Question generation failed after {e.attempts} attempts: {e.last_error}")
        return QuestionsResponse(questions=[], error=GENERATION_FAILED_MESSAGE)
    except MalformedRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationMissingError as e:
        logger.error(f"Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return QuestionsResponse(questions=questions)


@router.post("/game", response_model=GameCreatedResponse)
async def create_game(request: QuizRequest, service: QuizService = Depends(get_quiz_service)):
    """Generate questions for a topic and store them as a new game."""
    if not request.topic:
        raise HTTPException(status_code=400, detail="Topic is required.")
    _check_amount(request.amount)

    try:
        game = await service.create_game(request)
    except ExtractionExhaustedError as e:
        logger.error(f"Game creation failed after {e.attempts} attempts: {e.last_error}")
        return JSONResponse(status_code=502, content={"error": GENERATION_FAILED_MESSAGE})
    except MalformedRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ConfigurationMissingError, StorageError) as e:
        logger.error(f"Game creation error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return GameCreatedResponse(gameId=game.id)


@router.get("/game/{game_id}", response_model=GameResponse)
async def get_game(game_id: str, service: QuizService = Depends(get_quiz_service)):
    try:
        game = service.get_game(game_id)
    except StorageError as e:
        logger.error(f"Game lookup error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if game is None:
        raise HTTPException(status_code=404, detail="Game not found.")
    return GameResponse(game=game)


@router.get("/topics")
async def topic_counts(service: QuizService = Depends(get_quiz_service)):
    """How many games were created per topic."""
    try:
        return {"topics": service.get_topic_counts()}
    except StorageError as e:
        logger.error(f"Topic count error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
