"""Configuration from .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Only required when questions are generated locally through OpenAI.
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"

    # If set, front-ends POST to this URL instead of calling OpenAI directly.
    QUESTION_SERVICE_URL: str | None = None
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    TIMER_INTERVAL_SECONDS: float = 0.1
    LOG_LEVEL: str = "INFO"

    # Settings page defaults.
    DEFAULT_LOWER_BOUND: str = "single digit addition"
    DEFAULT_UPPER_BOUND: str = "division to 9"
    # One skill per line, easiest first.
    DEFAULT_SKILLS: str = (
        "single digit addition\n"
        "single digit subtraction\n"
        "multiplication to 5\n"
        "division to 9"
    )

    class Config:
        env_file = ".env"


settings = Settings()
