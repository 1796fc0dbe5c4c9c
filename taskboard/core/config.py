"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Task Board"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = [
        "http://localhost:4200",
        "http://localhost:3000",
    ]

    # Database
    DATABASE_URL: str = "sqlite:///./taskboard.db"

    # Auth
    JWT_SECRET: str = "super-secret-jwt-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60

    # Boards & tasks
    DEFAULT_BOARD_COLOR: str = "#3498db"
    BOARD_NAME_UNIQUE_PER_OWNER: bool = True
    DUE_SOON_DAYS: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
