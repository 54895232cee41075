from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "ParkSync"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Durable store
    STORE_BACKEND: str = "file"  # memory | file | redis
    STORE_PATH: str = ".parksync"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # Storage slots
    QUEUE_KEY: str = "@offline_queue"
    DEAD_LETTER_KEY: str = "@offline_queue:dead_letter"
    DEAD_LETTER_MAX_ENTRIES: int = 100
    CACHE_GARAGES_KEY: str = "@cached_garages"

    # Retry Settings
    QUEUE_MAX_RETRIES: int = 3
    HANDLER_TIMEOUT_SECONDS: float = 30.0  # 0 disables the timeout

    # Parking API
    API_URL: str = "http://localhost:3000/api"
    API_TIMEOUT_SECONDS: float = 10.0
    API_TOKEN: Optional[str] = None

    # Reachability probing
    REACHABILITY_URL: Optional[str] = None
    REACHABILITY_INTERVAL_SECONDS: float = 15.0

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        allowed_envs = ["development", "staging", "production", "testing"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {allowed_levels}")
        return v.upper()

    @field_validator("STORE_BACKEND")
    @classmethod
    def validate_store_backend(cls, v):
        allowed_backends = ["memory", "file", "redis"]
        if v not in allowed_backends:
            raise ValueError(f"Store backend must be one of: {allowed_backends}")
        return v

    @field_validator("QUEUE_MAX_RETRIES", "DEAD_LETTER_MAX_ENTRIES")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("Value must be a positive integer")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
