# app/core/config.py
# 환경변수 로딩 (.env), 프로세스 환경변수가 있으면 그 값이 우선
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "photos"
    PHOTOS_COLLECTION: str = "photos"

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # 개발/테스트용: MongoDB 대신 메모리 저장소 사용
    USE_IN_MEMORY_STORE: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
