"""
Application configuration.

Loads settings from environment variables and .env file.
Engine constants and service settings live here, nowhere else.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from mode_advisor.domain.engagement.entities import EngineTuning


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_polling: Rate limit for the suggestion polling endpoint.
        database_url: SQLAlchemy URL for engagement storage.

    Engine tunables (score_decay onwards) are starting points to be
    validated against real usage, not fixed contract values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "Mode Advisor"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_polling: str = "30/minute"

    database_url: str = "sqlite:///./mode_advisor.db"

    # --- Recommendation engine ---
    score_decay: float = 0.85
    activation_threshold: float = 60.0
    dominance_margin: float = 15.0
    min_messages: int = 3
    suggestion_cooldown_seconds: int = 300  # 5 minutes
    dismissal_ttl_hours: int = 24

    def engine_tuning(self) -> EngineTuning:
        """Return the engine constants as a domain value object."""
        return EngineTuning(
            score_decay=self.score_decay,
            activation_threshold=self.activation_threshold,
            dominance_margin=self.dominance_margin,
            min_messages=self.min_messages,
            suggestion_cooldown_seconds=self.suggestion_cooldown_seconds,
            dismissal_ttl_hours=self.dismissal_ttl_hours,
        )


settings = Settings()
