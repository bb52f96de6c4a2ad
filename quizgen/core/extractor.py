# extractor.py
"""
Structured-output extraction engine.

Turns a free-text LLM answer into validated records shaped like an output
shape descriptor:

1. Build strict-JSON format instructions from the shape
2. Compose system prompt + instructions + previous error + user prompt(s)
3. Call the text generator
4. Parse JSON, repairing quoting only when it does not parse as is
5. Validate fields, coerce enumerated values
6. On any failure, retry with the error fed back into the prompt

All-or-nothing: either every record validates or ExtractionExhaustedError
is raised after ``max_attempts`` attempts.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Sequence, Union

from quizgen.core.config import settings
from quizgen.core.exceptions import (
    ConfigurationMissingError,
    ExtractionExhaustedError,
    MalformedRequestError,
    ValidationFailure,
)
from quizgen.core.format_instructions import build_format_instructions, compose_prompt
from quizgen.core.llm import TextGenerator
from quizgen.core.parsers import StrictJSONOutputParser
from quizgen.core.retry import Attempting, AttemptOutcome, Succeeded, advance, is_terminal
from quizgen.core.shape import OutputShape, validate_records, validate_shape

logger = logging.getLogger(__name__)

PromptBatch = Union[str, Sequence[str]]


@dataclass(frozen=True)
class ExtractionOptions:
    """Per-call extraction settings."""
    default_category: str = ""
    value_only: bool = False
    model: Optional[str] = None  # None -> extractor default
    temperature: float = 0.0
    max_attempts: int = 3
    verbose: bool = False


class StructuredExtractor:
    """
    Prompts a text generator for strict JSON and validates the answer.

    The extractor keeps no per-call state, so one instance can serve
    concurrent calls.

    Example:
        extractor = StructuredExtractor(create_generator(settings))
        questions = await extractor.extract(
            "You generate quiz questions.",
            ["Question about Python", "Question about Rust"],
            {"question": "question", "answer": "answer"},
        )
    """

    def __init__(
        self,
        generator: TextGenerator,
        default_model: Optional[str] = None,
        default_options: Optional[ExtractionOptions] = None
    ):
        if generator is None:
            raise ConfigurationMissingError("No text generator configured for the extractor")

        self.generator = generator
        self.default_model = default_model or settings.LLM_MODEL
        self.default_options = default_options or ExtractionOptions(
            temperature=settings.LLM_TEMPERATURE,
            max_attempts=settings.LLM_MAX_ATTEMPTS
        )
        self.parser = StrictJSONOutputParser()

    async def extract(
        self,
        system_prompt: str,
        prompts: PromptBatch,
        shape: OutputShape,
        options: Optional[ExtractionOptions] = None
    ) -> Any:
        """
        Generate one validated record per prompt.

        Args:
            system_prompt: Instruction placed before the format rules
            prompts: A single prompt, or a sequence of prompts (one record each)
            shape: Output shape descriptor
            options: Extraction options (defaults to the extractor's)

        Returns:
            A single record for a single prompt, otherwise a list of records
            in prompt order

        Raises:
            MalformedRequestError: Invalid shape, prompts or options
            ExtractionExhaustedError: Every attempt failed validation
        """
        options = options or self.default_options
        if options.model is None:
            options = replace(options, model=self.default_model)

        list_input = not isinstance(prompts, str)
        prompt_list = self._normalize_prompts(prompts)
        validate_shape(shape)
        if options.max_attempts < 1:
            raise MalformedRequestError(f"max_attempts must be at least 1, got {options.max_attempts}")

        format_instructions = build_format_instructions(shape, list_input)

        state = Attempting()
        while not is_terminal(state):
            full_prompt = compose_prompt(system_prompt, format_instructions, state.feedback, prompt_list)
            outcome = await self._attempt(full_prompt, prompt_list, shape, list_input, options, state.index)
            state = advance(state, outcome, options.max_attempts)

        if isinstance(state, Succeeded):
            logger.info(f"✅ Structured output validated (attempt {state.attempts}/{options.max_attempts})")
            return state.result

        # Exhausted: the only other terminal state
        logger.error(f"Structured extraction failed after {state.attempts} attempts: {state.last_error}")
        raise ExtractionExhaustedError(
            f"Structured extraction failed after {state.attempts} attempts.{state.feedback}",
            last_error=state.last_error,
            attempts=state.attempts
        )

    async def _attempt(
        self,
        full_prompt: str,
        prompt_list: List[str],
        shape: OutputShape,
        list_input: bool,
        options: ExtractionOptions,
        index: int
    ) -> AttemptOutcome:
        """Run one attempt; every failure becomes an outcome, not an exception."""
        try:
            try:
                raw = await self.generator.generate(full_prompt, options.temperature, options.model)
            except (ConfigurationMissingError, MalformedRequestError):
                raise
            except Exception as e:
                raise ValidationFailure(f"LLM call failed: {type(e).__name__}: {e}") from e

            if options.verbose:
                logger.info(f"Full prompt:\n{full_prompt}")
                logger.info(f"Raw response:\n{raw}")

            data = self.parser.parse(raw)

            if list_input and not isinstance(data, list):
                raise ValidationFailure("Expected a list of JSON objects but got non-list output.", raw_text=raw)
            records = data if list_input else [data]

            if list_input and len(records) != len(prompt_list):
                raise ValidationFailure(
                    f"Expected {len(prompt_list)} JSON objects (one per input) but got {len(records)}.",
                    raw_text=raw
                )

            records = validate_records(records, shape, options.default_category, options.value_only)
            return AttemptOutcome.success(records if list_input else records[0])

        except ValidationFailure as e:
            logger.warning(f"Structured output attempt {index + 1}/{options.max_attempts} failed: {e}")
            return AttemptOutcome.failure(str(e))

    def _normalize_prompts(self, prompts: PromptBatch) -> List[str]:
        if isinstance(prompts, str):
            if not prompts.strip():
                raise MalformedRequestError("Prompt must not be empty")
            return [prompts]

        try:
            prompt_list = list(prompts)
        except TypeError as e:
            raise MalformedRequestError(
                f"Prompts must be a string or a sequence of strings, got {type(prompts).__name__}"
            ) from e

        if not prompt_list:
            raise MalformedRequestError("Prompt batch must contain at least one prompt")

        for i, prompt in enumerate(prompt_list):
            if not isinstance(prompt, str) or not prompt.strip():
                raise MalformedRequestError(f"Prompt at index {i} must be a non-empty string")

        return prompt_list
