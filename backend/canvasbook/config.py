"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./canvasbook.db"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # Image storage
    STORAGE_DIR: str = "storage"
    IMAGE_ROUTE_PREFIX: str = "/api/images"
    MAX_CANVAS_SIZE: int = 50 * 1024 * 1024  # 50 MB

    def storage_root(self) -> Path:
        return Path(self.STORAGE_DIR).resolve()

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
