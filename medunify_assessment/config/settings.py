"""Application configuration and settings."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Service Configuration
    service_name: str = "medunify-assessment"
    environment: str = "development"

    # Remote Assessment API
    api_base_url: str = "http://localhost:8000"
    api_prefix: str = "/api/v1/assessment"
    request_timeout: float = 30.0

    # Bearer credential issued by the auth service
    access_token: Optional[str] = None

    # Conversation rules (mirror of the server-side minimum)
    min_questions_for_completion: int = 3
    history_default_limit: int = 10

    # Seed messages
    welcome_message: str = (
        "Hi! I'm here to help assess your health. Based on your medical history "
        "and uploaded reports, I'll ask some questions to understand your symptoms "
        "better. What health concern would you like to discuss today?"
    )
    welcome_back_message: str = (
        "Welcome back! You have an active assessment session. Your last message "
        'was: "{last_message}". You can continue from where you left off or start over.'
    )

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "MEDUNIFY_"
        case_sensitive = False


# Global settings instance
settings = Settings()
