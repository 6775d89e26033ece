"""Dockwatch configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Dockwatch settings loaded from environment variables."""

    # Agent identity
    agent_id: str = ""  # Auto-generated if not set
    host: str = "0.0.0.0"
    port: int = 8002

    # Docker connection
    # Empty means "use the environment" (DOCKER_HOST, DOCKER_TLS_VERIFY, ...)
    docker_host: str = ""
    docker_api_version: str = "auto"

    # Event subscription backoff (seconds)
    event_initial_interval: float = 1.0
    event_max_interval: float = 20.0

    # Controller connection
    # When set, container events are forwarded to the controller
    controller_url: str = ""
    forward_timeout: float = 5.0

    # Logging configuration
    log_format: str = "json"  # "json" or "text"
    log_level: str = "INFO"

    class Config:
        env_prefix = "DOCKWATCH_"


settings = Settings()
