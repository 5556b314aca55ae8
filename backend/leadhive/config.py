from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Default to sqlite, but easy to override with env var DATABASE_URL
    DATABASE_URL: str = "sqlite:///./leadhive.db"
    DATABASE_ECHO: bool = False

    # JWT
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    APP_TITLE: str = "LeadHive CRM"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Used when building shareable links to public forms
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Jotform
    JOTFORM_API_KEY: Optional[str] = None
    JOTFORM_BASE_URL: str = "https://api.jotform.com"
    JOTFORM_TIMEOUT_SECONDS: float = 10.0

settings = Settings()
