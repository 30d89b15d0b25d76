# app/db/photo_store.py
"""
Photo 저장소 어댑터.

MongoPhotoStore 는 motor 로 photos 컬렉션에 읽고 쓰고, InMemoryPhotoStore 는
개발/테스트용이다. 저장소 쪽 실패는 모두 PhotoStoreError 하나로 올려 보내고,
HTTP 응답으로 바꾸는 건 라우터가 한다.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.db.init import close_db, init_db, ping_db
from app.db.models.photo import PhotoDoc, PhotoSummary

log = logging.getLogger(__name__)


class PhotoStoreError(Exception):
    """저장소 조회/저장 실패 (드라이버 오류, 잘못된 id, 미연결)"""


class PhotoStore(Protocol):
    async def connect(self) -> None:
        ...

    def close(self) -> None:
        ...

    async def ping(self) -> None:
        ...

    async def insert(self, photo: PhotoDoc) -> PhotoDoc:
        ...

    async def get(self, photo_id: str) -> Optional[PhotoDoc]:
        ...

    async def list_recent(self) -> List[PhotoSummary]:
        ...


def _object_id(photo_id: str) -> ObjectId:
    try:
        return ObjectId(photo_id)
    except (InvalidId, TypeError) as e:
        raise PhotoStoreError(f"'{photo_id}' is not a valid ObjectId") from e


class MongoPhotoStore:
    def __init__(self, uri: str, db_name: str, collection: str = "photos"):
        self.uri = uri
        self.db_name = db_name
        self.collection = collection
        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        # 클라이언트를 먼저 붙여두므로 ping 이 실패해도 이후 요청에서 드라이버가 재연결한다
        self._client, self._db = init_db(self.uri, self.db_name)
        await ping_db(self._db)
        log.info("MongoDB connected!")

    def close(self) -> None:
        close_db(self._client)
        self._client = None
        self._db = None

    def _photos(self) -> AsyncIOMotorCollection:
        if self._db is None:
            raise PhotoStoreError("MongoDB is not initialized yet.")
        return self._db[self.collection]

    async def ping(self) -> None:
        if self._db is None:
            raise PhotoStoreError("MongoDB is not initialized yet.")
        try:
            await ping_db(self._db)
        except PyMongoError as e:
            raise PhotoStoreError(str(e)) from e

    async def insert(self, photo: PhotoDoc) -> PhotoDoc:
        coll = self._photos()
        try:
            result = await coll.insert_one(photo.to_mongo())
        except PyMongoError as e:
            raise PhotoStoreError(f"insert failed: {e}") from e
        return photo.model_copy(update={"id": str(result.inserted_id)})

    async def get(self, photo_id: str) -> Optional[PhotoDoc]:
        oid = _object_id(photo_id)
        coll = self._photos()
        try:
            doc = await coll.find_one({"_id": oid})
        except PyMongoError as e:
            raise PhotoStoreError(f"find failed: {e}") from e
        if doc is None:
            return None
        return PhotoDoc(
            id=str(doc["_id"]),
            image=bytes(doc["image"]),
            filename=doc["filename"],
            timestamp=doc["timestamp"],
        )

    async def list_recent(self) -> List[PhotoSummary]:
        coll = self._photos()
        try:
            # image 필드는 제외 (용량 절약)
            cursor = coll.find({}, {"image": 0}).sort("timestamp", -1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PhotoStoreError(f"list failed: {e}") from e
        return [
            PhotoSummary(id=str(d["_id"]), filename=d["filename"], timestamp=d["timestamp"])
            for d in docs
        ]


class InMemoryPhotoStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.photos: Dict[str, PhotoDoc] = {}

    async def connect(self) -> None:
        log.info("using in-memory photo store")

    def close(self) -> None:
        pass

    async def ping(self) -> None:
        pass

    def reset(self) -> None:
        self.photos.clear()

    async def insert(self, photo: PhotoDoc) -> PhotoDoc:
        saved = photo.model_copy(update={"id": str(ObjectId())})
        self.photos[saved.id] = saved
        return saved

    async def get(self, photo_id: str) -> Optional[PhotoDoc]:
        return self.photos.get(str(_object_id(photo_id)))

    async def list_recent(self) -> List[PhotoSummary]:
        ordered = sorted(self.photos.values(), key=lambda p: p.timestamp, reverse=True)
        return [PhotoSummary(id=p.id, filename=p.filename, timestamp=p.timestamp) for p in ordered]
