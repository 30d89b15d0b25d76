# app/api/routes_photo.py
# 사진 업로드/조회/목록

from __future__ import annotations
from typing import List
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect

from app.core.deps import get_photo_store
from app.db.models.photo import PhotoDoc, PhotoSummary, UploadResult
from app.db.photo_store import PhotoStore, PhotoStoreError

log = logging.getLogger(__name__)

router = APIRouter(tags=["photo"])


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={**extra, "message": message})


@router.post("/upload", response_model=UploadResult)
async def upload_photo(request: Request, store: PhotoStore = Depends(get_photo_store)):
    """
    multipart 'file' 필드를 메모리로 읽어 DB에 저장

    파일 파트가 아니거나 본문을 파싱할 수 없으면 모두 "파일 없음" 으로 처리한다.
    """
    # 크기 제한 없음: 전부 메모리에 올린다
    try:
        async with request.form() as form:
            file = form.get("file")
            if not isinstance(file, UploadFile):
                return _error(400, "No file received", success=False)
            image_bytes = await file.read()
    except (HTTPException, MultiPartException, ClientDisconnect):
        log.warning("업로드 본문 파싱 실패", exc_info=True)
        return _error(400, "No file received", success=False)

    photo = PhotoDoc.from_upload(image_bytes)

    try:
        saved = await store.insert(photo)
    except PhotoStoreError:
        log.error("사진 저장 실패", exc_info=True)
        return _error(500, "Error saving photo", success=False)

    log.info("saved %s (%d bytes) as %s", saved.filename, len(image_bytes), saved.id)
    return UploadResult(success=True, message="Photo saved!")


@router.get("/image/{photo_id}")
async def get_image(photo_id: str, store: PhotoStore = Depends(get_photo_store)):
    """저장된 원본 바이트를 그대로 반환 (항상 image/jpeg)"""
    try:
        photo = await store.get(photo_id)
    except PhotoStoreError:
        log.error(f"사진 조회 실패: {photo_id}", exc_info=True)
        return _error(500, "Error fetching image")

    if photo is None:
        return PlainTextResponse("Image not found", status_code=404)

    return Response(content=photo.image, media_type="image/jpeg")


@router.get("/photos", response_model=List[PhotoSummary])
async def list_photos(store: PhotoStore = Depends(get_photo_store)):
    # 최신순, image 바이트 제외
    try:
        return await store.list_recent()
    except PhotoStoreError:
        log.error("사진 목록 조회 실패", exc_info=True)
        return _error(500, "Error fetching photos")
