from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    RESET_DB: bool = False

    # object storage (local filesystem backend)
    STORAGE_DIR: str = "storage/blobs"
    STORAGE_PUBLIC_URL: str = "http://127.0.0.1:8000/uploads"

    # admin workflows
    LOGS_PAGE_SIZE: int = 50
    FLASH_SECONDS: float = 3.0
    SEARCH_DEBOUNCE_MS: int = 500

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("STORAGE_DIR", mode="after")
    @classmethod
    def resolve_storage_dir(cls, v: str) -> str:
        path = Path(v)
        if not path.is_absolute():
            path = (Path(__file__).parent.parent / v).resolve()
        path.mkdir(parents=True, exist_ok=True)
        return str(path)


settings = Settings()
