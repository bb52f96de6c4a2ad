from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    # App Config
    APP_NAME: str = "quizgen Quiz Generator"
    APP_VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development" # "development" or "production"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # LLM Config
    LLM_PROVIDER: str = "gemini" # "gemini", "openai", "groq" or "huggingface"
    LLM_MODEL: str = "gemini-1.5-flash"
    LLM_TEMPERATURE: float = 0.0
    LLM_MAX_ATTEMPTS: int = 3
    LLM_MAX_TOKENS: int = 2048
    LLM_TIMEOUT: int = 120

    # Google Gemini
    GEMINI_API_KEY: Optional[SecretStr] = None

    # OpenAI compatible API (DeepSeek, Ollama, etc)
    OPENAI_API_KEY: Optional[SecretStr] = None
    OPENAI_BASE_URL: Optional[str] = None

    # Groq
    GROQ_API_KEY: Optional[SecretStr] = None

    # Hugging Face Inference API
    HUGGINGFACE_API_TOKEN: Optional[SecretStr] = None

    # Game storage
    QUIZ_STORE: str = "redis" # "redis" or "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    GAME_TTL_SECONDS: int = 7 * 24 * 3600

    # Quiz limits
    MAX_QUESTIONS_PER_REQUEST: int = 10

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

settings = Settings()
