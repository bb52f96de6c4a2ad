"""Schemas package."""

from .quiz import (
    QuestionType,
    QuizRequest,
    OpenEndedQuestion,
    MCQQuestion,
    QuestionsResponse,
    GameQuestion,
    Game,
    GameCreatedResponse,
    GameResponse,
)

__all__ = [
    # Requests
    "QuestionType",
    "QuizRequest",
    # Model output
    "OpenEndedQuestion",
    "MCQQuestion",
    # Responses
    "QuestionsResponse",
    "GameCreatedResponse",
    "GameResponse",
    # Games
    "GameQuestion",
    "Game",
]
