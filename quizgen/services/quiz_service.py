import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from quizgen.core.extractor import StructuredExtractor
from quizgen.core.prompt_manager import PromptManager, get_prompt_manager
from quizgen.schemas import Game, GameQuestion, MCQQuestion, OpenEndedQuestion, QuestionType, QuizRequest
from quizgen.storage.game_store import GameStore

logger = logging.getLogger(__name__)

OPEN_ENDED_SHAPE: Dict[str, str] = {
    "question": "question",
    "answer": "answer with max length of 15 words",
}

MCQ_SHAPE: Dict[str, str] = {
    "question": "question",
    "answer": "answer with max length of 15 words",
    "option1": "option1 with max length of 15 words",
    "option2": "option2 with max length of 15 words",
    "option3": "option3 with max length of 15 words",
}

SHAPES = {
    QuestionType.MCQ: MCQ_SHAPE,
    QuestionType.OPEN_ENDED: OPEN_ENDED_SHAPE,
}


class QuizService:
    """Generates quiz questions through the structured extractor and stores games."""

    def __init__(
        self,
        extractor: StructuredExtractor,
        store: GameStore,
        prompts: Optional[PromptManager] = None,
        rng: Optional[random.Random] = None
    ):
        self.extractor = extractor
        self.store = store
        self.prompts = prompts or get_prompt_manager()
        self.rng = rng or random.Random()

    async def generate_questions(self, request: QuizRequest) -> List[dict]:
        """
        Ask the model for ``request.amount`` questions about ``request.topic``.

        Raises:
            ExtractionExhaustedError: The model never produced valid output
        """
        kind = request.type.value
        base_system = self.prompts.load_prompt("base_system").strip()
        system_prompt = self.prompts.load_prompt(
            f"{kind}_system", BASE_SYSTEM=base_system, TOPIC=request.topic
        )
        user_prompt = self.prompts.load_prompt(f"{kind}_user", TOPIC=request.topic).strip()

        logger.info(f"Generating {request.amount} {kind} question(s) about '{request.topic}'")
        return await self.extractor.extract(
            system_prompt,
            [user_prompt] * request.amount,
            SHAPES[request.type]
        )

    async def create_game(self, request: QuizRequest) -> Game:
        """Generate questions and persist them as a new game."""
        questions = await self.generate_questions(request)

        game = Game(
            id=str(uuid.uuid4()),
            topic=request.topic,
            game_type=request.type,
            time_started=datetime.now(timezone.utc),
            questions=[self._to_game_question(q, request.type) for q in questions],
        )

        self.store.save_game(game)
        self.store.increment_topic(request.topic)
        logger.info(f"✅ Game {game.id} created with {len(game.questions)} question(s)")
        return game

    def get_game(self, game_id: str) -> Optional[Game]:
        return self.store.get_game(game_id)

    def get_topic_counts(self) -> Dict[str, int]:
        return self.store.get_topic_counts()

    def _to_game_question(self, record: dict, question_type: QuestionType) -> GameQuestion:
        options = None
        if question_type == QuestionType.MCQ:
            parsed = MCQQuestion.model_validate(record)
            options = [parsed.option1, parsed.option2, parsed.option3, parsed.answer]
            self.rng.shuffle(options)
        else:
            parsed = OpenEndedQuestion.model_validate(record)

        return GameQuestion(
            id=str(uuid.uuid4()),
            question=parsed.question,
            answer=parsed.answer,
            options=options,
            question_type=question_type,
        )
