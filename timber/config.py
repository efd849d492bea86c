# timber/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Credentials
    TIMBER_API_KEY: str = ""
    TIMBER_SOURCE_ID: str = ""

    # Delivery
    TIMBER_ENDPOINT: str = "https://logs.timber.io"
    TIMBER_TIMEOUT: float = 10.0  # seconds per HTTP request

    # Batching
    TIMBER_BATCH_SIZE: int = 1000
    TIMBER_BATCH_INTERVAL: float = 1.0  # seconds
    TIMBER_SYNC_MAX: int = 5  # concurrent deliveries

    # Retry
    TIMBER_RETRY_COUNT: int = 3
    TIMBER_RETRY_BACKOFF: float = 0.5  # seconds, doubled per attempt
    TIMBER_IGNORE_EXCEPTIONS: bool = False

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
