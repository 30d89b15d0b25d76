# app/core/deps.py
# 공용 의존성: 저장소 어댑터는 app.state 에 두고 핸들러마다 주입
from fastapi import Request

from app.db.photo_store import PhotoStore


def get_photo_store(request: Request) -> PhotoStore:
    return request.app.state.photo_store
