"""
Prompt template manager for quizgen.

Loads quiz prompt templates from quizgen/prompts/*.txt and fills
{{VARIABLE}} placeholders.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from quizgen.core.exceptions import PromptTemplateError

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

_VARIABLE_RE = re.compile(r"\{\{(\w+)\}\}")


class PromptManager:
    """
    Cached template loader with variable substitution.

    Example:
        manager = PromptManager()
        prompt = manager.load_prompt("mcq_system", TOPIC="photosynthesis")
    """

    def __init__(self, prompts_dir: Optional[Union[str, Path]] = None):
        self.prompts_dir = Path(prompts_dir) if prompts_dir else PROMPTS_DIR
        self._cache: Dict[str, str] = {}

        if not self.prompts_dir.exists():
            logger.warning(f"Prompts directory not found: {self.prompts_dir}")

    def load_prompt(self, name: str, **kwargs: Any) -> str:
        """Load template ``name`` and substitute ``kwargs`` into it."""
        template = self._load_template(name)
        return self._substitute_variables(template, kwargs)

    def _load_template(self, name: str) -> str:
        if name in self._cache:
            return self._cache[name]

        template_file = self.prompts_dir / f"{name}.txt"
        if not template_file.exists():
            raise PromptTemplateError(
                f"Prompt template not found: {template_file}. "
                f"Available templates: {self.list_templates()}"
            )

        try:
            template = template_file.read_text(encoding="utf-8")
        except OSError as e:
            raise PromptTemplateError(f"Error loading template {name}: {e}") from e

        self._cache[name] = template
        logger.debug(f"Loaded prompt template: {name}")
        return template

    def _substitute_variables(self, template: str, variables: Dict[str, Any]) -> str:
        result = template
        for key, value in variables.items():
            result = result.replace(f"{{{{{key}}}}}", str(value))

        unsubstituted = _VARIABLE_RE.findall(result)
        if unsubstituted:
            raise PromptTemplateError(f"Unsubstituted variables in template: {unsubstituted}")

        return result

    def reload(self, name: Optional[str] = None) -> None:
        """Drop cached templates so the next load reads from disk."""
        if name:
            self._cache.pop(name, None)
            logger.info(f"Reloaded template: {name}")
        else:
            self._cache.clear()
            logger.info("Reloaded all templates")

    def list_templates(self) -> List[str]:
        if not self.prompts_dir.exists():
            return []
        return sorted(f.stem for f in self.prompts_dir.glob("*.txt"))


_prompt_manager: Optional[PromptManager] = None


def get_prompt_manager() -> PromptManager:
    """Shared PromptManager instance."""
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager
