# parsers.py
"""
Output parser for strict-JSON LLM responses.

The model is told to answer with bare JSON, so parsing is deliberately
narrow: strip whitespace/BOM and hand the text to json.loads. Only when that
fails is the quote repair pass applied before a second json.loads. Anything
that still fails is a ValidationFailure and costs the caller one attempt.
"""

import json
import re
import logging
from typing import Any
from langchain_core.output_parsers import BaseOutputParser

from quizgen.core.exceptions import ValidationFailure

logger = logging.getLogger(__name__)

# A double quote wedged between two word characters was an apostrophe
# before the single -> double quote swap (it's -> it"s -> it's).
_APOSTROPHE_RE = re.compile(r'(\w)"(\w)')


def repair_quotes(text: str) -> str:
    """
    Best-effort quote normalization for near-miss JSON.

    Every single quote becomes a double quote, then double quotes sitting
    between two word characters are turned back into apostrophes.

    Limitations:
    - Quoted words inside values ('n' in "rock 'n' roll") end up as bare
      double quotes and break the JSON.
    - An apostrophe next to punctuation or whitespace (the students' book)
      is not restored, so valid JSON holding one is corrupted. Only run this
      on text that json.loads has already rejected.
    """
    return _APOSTROPHE_RE.sub(r"\1'\2", text.replace("'", '"'))


class StrictJSONOutputParser(BaseOutputParser):
    """
    Parser for strict JSON answers (a single object or a list of objects).
    Raises ValidationFailure instead of json.JSONDecodeError.
    """

    def parse(self, text: str) -> Any:
        """Parse LLM output as JSON, repairing quoting only if it is not valid as is."""
        cleaned = self._clean_text(text)

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError:
            pass

        repaired = repair_quotes(cleaned)
        try:
            data = json.loads(repaired)
        except json.JSONDecodeError as e:
            logger.debug(f"Failed JSON: {repaired[:300]}")
            raise ValidationFailure(f"Invalid JSON format: {e}", raw_text=text) from e

        logger.debug(f"✅ Parsed strict JSON after quote repair ({len(repaired)} chars)")
        return data

    def _clean_text(self, text: str) -> str:
        """Remove surrounding whitespace and a leading BOM."""
        if text is None:
            return ""
        text = text.strip()
        if text.startswith('\ufeff'):
            text = text[1:]
        return text

    @property
    def _type(self) -> str:
        return "strict_json"
