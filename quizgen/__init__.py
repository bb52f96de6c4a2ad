"""quizgen: quiz generation backend with strict structured LLM output."""

__version__ = "0.1.0"
