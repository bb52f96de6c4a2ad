"""
Quiz-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionType(str, Enum):
    MCQ = "mcq"
    OPEN_ENDED = "open_ended"


class QuizRequest(BaseModel):
    """Request to generate questions (also used to create a game)."""
    topic: str = Field(..., min_length=4, max_length=50, description="Quiz topic")
    type: QuestionType = Field(..., description="Question type: 'mcq' or 'open_ended'")
    amount: int = Field(..., ge=1, description="Number of questions to generate")

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, value: str) -> str:
        return value.strip()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"topic": "photosynthesis", "type": "mcq", "amount": 5}
        }
    )


class OpenEndedQuestion(BaseModel):
    """Question as returned by the model for open-ended quizzes."""
    question: str
    answer: str

    @field_validator("*", mode="before")
    @classmethod
    def scalar_to_str(cls, value):
        # Models sometimes answer numeric questions with bare numbers
        if isinstance(value, (int, float)):
            return str(value)
        return value


class MCQQuestion(OpenEndedQuestion):
    """Question as returned by the model for multiple choice quizzes."""
    option1: str
    option2: str
    option3: str


class QuestionsResponse(BaseModel):
    """Response from question generation."""
    questions: List[dict] = Field(default_factory=list)
    error: Optional[str] = None


class GameQuestion(BaseModel):
    """Question stored with a game."""
    id: str
    question: str
    answer: str
    options: Optional[List[str]] = None
    question_type: QuestionType


class Game(BaseModel):
    """A generated quiz and its questions."""
    id: str
    topic: str
    game_type: QuestionType
    time_started: datetime
    questions: List[GameQuestion] = Field(default_factory=list)


class GameCreatedResponse(BaseModel):
    gameId: str


class GameResponse(BaseModel):
    game: Game
