from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "TASKHEAP"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # Database
    DATABASE_URL: str = "sqlite:///./taskheap.db"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Rate limiting (applied to the pairwise conflict endpoints)
    RATE_LIMIT_PER_MINUTE: int = 60

    # Conflict scan is O(n^2) over pending tasks; refuse above this size
    CONFLICT_SCAN_MAX_TASKS: int = 2000

    class Config:
        # Search .env in current dir AND backend/ dir
        env_file = (".env", "backend/.env", "../.env")
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
