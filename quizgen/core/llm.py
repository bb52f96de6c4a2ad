"""
Text generation backends.

Every backend exposes the same capability: send a prompt, receive text.
Credentials are resolved once from Settings when a backend is built;
a missing credential raises ConfigurationMissingError before any model call.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

import google.generativeai as genai
from groq import AsyncGroq
from huggingface_hub import AsyncInferenceClient
from openai import AsyncOpenAI

from quizgen.core.config import Settings, settings as default_settings
from quizgen.core.exceptions import ConfigurationMissingError

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        ...


class GeminiGenerator:
    """Google Gemini via google-generativeai."""

    def __init__(self, api_key: str, max_tokens: int = 2048):
        genai.configure(api_key=api_key)
        self.max_tokens = max_tokens
        logger.info("🔹 LLM backend initialized: Gemini")

    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        model_instance = genai.GenerativeModel(model)
        response = await model_instance.generate_content_async(
            [{"role": "user", "parts": [prompt]}],
            generation_config=genai.GenerationConfig(
                temperature=temperature,
                max_output_tokens=self.max_tokens,
            ),
        )
        return response.text


class OpenAICompatibleGenerator:
    """OpenAI chat completions API (also DeepSeek, Ollama, etc)."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        max_tokens: int = 2048,
        timeout: int = 120
    ):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.max_tokens = max_tokens
        logger.info(f"🔹 LLM backend initialized: OpenAI compatible ({base_url or 'default endpoint'})")

    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content or ""


class GroqGenerator:
    """Groq chat completions for fast Llama inference."""

    def __init__(self, api_key: str, max_tokens: int = 2048, timeout: int = 120):
        self.client = AsyncGroq(api_key=api_key, timeout=timeout)
        self.max_tokens = max_tokens
        logger.info("🔹 LLM backend initialized: Groq")

    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content or ""


class HuggingFaceGenerator:
    """Hugging Face Inference API chat completion."""

    def __init__(self, token: str, max_tokens: int = 2048, timeout: int = 120):
        self.client = AsyncInferenceClient(token=token, timeout=timeout)
        self.max_tokens = max_tokens
        logger.info("🔹 LLM backend initialized: Hugging Face")

    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        response = await self.client.chat_completion(
            messages=[{"role": "user", "content": prompt}],
            model=model,
            max_tokens=self.max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content or ""


def _require_secret(config: Settings, name: str) -> str:
    secret = getattr(config, name)
    value = secret.get_secret_value() if secret is not None else ""
    if not value:
        raise ConfigurationMissingError(
            f"{name} is not set but LLM_PROVIDER={config.LLM_PROVIDER} requires it",
            setting=name
        )
    return value


def create_generator(config: Optional[Settings] = None) -> TextGenerator:
    """
    Build the text generator selected by LLM_PROVIDER.

    Raises:
        ConfigurationMissingError: Unknown provider or missing credential
    """
    config = config or default_settings
    provider = config.LLM_PROVIDER.lower()

    if provider == "gemini":
        return GeminiGenerator(
            api_key=_require_secret(config, "GEMINI_API_KEY"),
            max_tokens=config.LLM_MAX_TOKENS
        )

    if provider == "openai":
        return OpenAICompatibleGenerator(
            api_key=_require_secret(config, "OPENAI_API_KEY"),
            base_url=config.OPENAI_BASE_URL,
            max_tokens=config.LLM_MAX_TOKENS,
            timeout=config.LLM_TIMEOUT
        )

    if provider == "groq":
        return GroqGenerator(
            api_key=_require_secret(config, "GROQ_API_KEY"),
            max_tokens=config.LLM_MAX_TOKENS,
            timeout=config.LLM_TIMEOUT
        )

    if provider == "huggingface":
        return HuggingFaceGenerator(
            token=_require_secret(config, "HUGGINGFACE_API_TOKEN"),
            max_tokens=config.LLM_MAX_TOKENS,
            timeout=config.LLM_TIMEOUT
        )

    raise ConfigurationMissingError(
        f"Unknown LLM_PROVIDER '{config.LLM_PROVIDER}' "
        "(expected gemini, openai, groq or huggingface)",
        setting="LLM_PROVIDER"
    )
