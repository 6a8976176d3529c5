from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "NutriGate"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ALLOW_ORIGIN: str = "*"

    # Model provider
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    ANALYSIS_MODEL: str = "gemini-2.5-flash"
    CHAT_MODEL: str = "gemini-2.5-pro"
    MODEL_TIMEOUT_SECONDS: float = 30.0

    # Identity service
    AUTH_MODE: str = "remote"  # "remote" or "jwt"
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    AUTH_TIMEOUT_SECONDS: float = 10.0

    # Request limits
    MAX_IMAGE_BASE64_LENGTH: int = 15_000_000
    MAX_CHAT_HISTORY_TURNS: int = 20

    # Rate limits
    CHAT_RATE_LIMIT_REQUESTS: int = 30
    CHAT_RATE_LIMIT_WINDOW_SECONDS: int = 60
    ANALYSIS_RATE_LIMIT_REQUESTS: int = 20
    ANALYSIS_RATE_LIMIT_WINDOW_SECONDS: int = 60

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
