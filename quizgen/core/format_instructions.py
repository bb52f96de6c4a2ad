"""
Prompt construction for strict-JSON extraction.
"""

from typing import List

from quizgen.core.shape import (
    OutputShape,
    has_choice_fields,
    has_dynamic_elements,
    serialize_shape,
)

LIST_FIELD_INSTRUCTION = "If any field is a list, pick the best matching element."
DYNAMIC_FIELD_INSTRUCTION = (
    "Any < > text must be dynamically generated. Example: '<location>' => 'garden'."
)
LIST_INPUT_INSTRUCTION = "Generate a list of JSON objects, one per input."
FEEDBACK_HEADER = "Previous attempt failed:"


def build_format_instructions(shape: OutputShape, list_input: bool) -> str:
    """Describe the exact JSON structure the model must return."""
    instructions = (
        "Respond ONLY in strict JSON matching this structure:\n"
        f"{serialize_shape(shape)}.\n"
        "Do not add extra text. No markdown. No escape characters."
    )

    if has_choice_fields(shape):
        instructions += f"\n{LIST_FIELD_INSTRUCTION}"

    if has_dynamic_elements(shape):
        instructions += f"\n{DYNAMIC_FIELD_INSTRUCTION}"

    if list_input:
        instructions += f"\n{LIST_INPUT_INSTRUCTION}"

    return instructions


def format_feedback(error_message: str) -> str:
    """Error segment appended to the next attempt's prompt."""
    return f"\n\n{FEEDBACK_HEADER}\n{error_message}"


def compose_prompt(
    system_prompt: str,
    format_instructions: str,
    feedback: str,
    prompts: List[str],
) -> str:
    """System prompt, format rules, prior error and user prompt(s), in that order."""
    user_text = "\n".join(prompts)
    return f"{system_prompt}\n{format_instructions}\n{feedback}\n{user_text}"
