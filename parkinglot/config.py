from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Parking Lot API"
    debug: bool = False
    environment: str = "production"

    # Database (snapshot store)
    database_url: str = "sqlite+aiosqlite:///./parkinglot.db"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Lot
    lot_name: str = "Main Lot"
    total_spots: int = 40
    reservation_grace_minutes: int = 10

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
