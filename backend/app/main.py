# app/main.py
# FastAPI 앱 초기화 및 라우터 설정

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes_page import router as page_router
from app.api.routes_photo import router as photo_router
from app.core.config import Settings, get_settings
from app.db.photo_store import InMemoryPhotoStore, MongoPhotoStore, PhotoStore, PhotoStoreError

log = logging.getLogger(__name__)


def build_store(settings: Settings) -> PhotoStore:
    if settings.USE_IN_MEMORY_STORE:
        return InMemoryPhotoStore()
    return MongoPhotoStore(
        settings.MONGODB_URI,
        settings.MONGODB_DB,
        collection=settings.PHOTOS_COLLECTION,
    )


def create_app(store: Optional[PhotoStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Photo Gallery - API", version="0.1.0")
    app.state.photo_store = store or build_store(settings)

    # CORS: 모든 origin 허용 (카메라 장치가 직접 업로드)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 앱 시작/종료 이벤트 핸들러
    @app.on_event("startup")
    async def on_startup() -> None:
        # 연결 실패는 로그만 남기고 서버는 계속 뜬다 (재시도 없음)
        try:
            await app.state.photo_store.connect()
        except Exception as e:
            log.error(f"photo store connection error: {e}", exc_info=True)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        app.state.photo_store.close()

    @app.get("/health")
    async def health(request: Request):
        ok = {"status": "ok", "db": "ok"}
        try:
            await request.app.state.photo_store.ping()
        except PhotoStoreError as e:
            ok["db"] = f"error: {e}"
        return ok

    # 라우터 prefix는 각 파일 내에서 정의함
    app.include_router(page_router)
    app.include_router(photo_router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
