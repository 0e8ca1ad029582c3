"""
Application configuration loader and it handles:
- Environment variables
- App settings
- Model configuration
- Database configuration
- Scheduled rating check configuration

And, the main purpose:
Central place for system configuration.
"""


from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./playstore_agent.db"
    APP_ENV: str = "development"  # development | production

    # LLM
    LLM_PROVIDER: str = "groq"  # groq | mock (for no-key dev)
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    AGENT_MAX_TOOL_ROUNDS: int = Field(3, ge=0)

    # Play Store lookups
    PLAYSTORE_LANG: str = "en"
    PLAYSTORE_COUNTRY: str = "us"

    # Scheduled rating check
    SCHEDULER_ENABLED: bool = False
    RATING_CHECK_INTERVAL_HOURS: int = 24
    RATING_CHECK_APPS: str = ""  # comma separated app names

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower().strip() == "production"

    @property
    def rating_check_apps(self) -> list[str]:
        return [name.strip() for name in self.RATING_CHECK_APPS.split(",") if name.strip()]

settings = Settings()
