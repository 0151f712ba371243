"""Environment-based configuration for the template field extractor."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Template extractor settings, loaded from environment variables."""

    # Server
    PORT: int = 8092

    # Gemini connection (empty key = AI extraction disabled, local dev default)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-pro"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"

    # Gemini timeouts (no retry: a failed call fails the task)
    GEMINI_TIMEOUT_SECONDS: int = 300
    GEMINI_CONNECT_TIMEOUT: int = 30
    GEMINI_TEMPERATURE: float = 0.1

    # Task status records and uploaded documents
    TASK_STORE_DIR: str = "temp"

    # Words of context collected on each side of a field
    CONTEXT_WORDS: int = 5

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
