from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    USERS_SERVICE_URL: str = "http://users-service:8001"
    ANNOUNCEMENTS_SERVICE_URL: str = "http://announcements-service:8002"
    EVENTS_SERVICE_URL: str = "http://events-service:8003"
    REQUEST_TIMEOUT: float = 30.0

    # Search page behaviour
    SEARCH_DEBOUNCE_SECONDS: float = 1.0
    SEARCH_LIMIT: int = 100
    QUERY_STALE_TIME: float = 0.0
    QUERY_CACHE_TIME: float = 300.0

    # Session cookie signed by the console; the token inside it comes from the auth provider
    LOGIN_URL: str = "/login"
    SESSION_SECRET_KEY: str
    SESSION_ALGORITHM: str = "HS256"
    SESSION_TTL_MINUTES: int = 60
    SESSION_COOKIE_NAME: str = "console_session"

    MAX_POSTER_SIZE: int = 5242880  # 5MB
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

    model_config = SettingsConfigDict(env_file=".env")

settings = Settings()


@lru_cache
def get_settings() -> Settings:
    return settings
