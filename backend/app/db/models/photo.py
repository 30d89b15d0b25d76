# app/db/models/photo.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def photo_filename(at: datetime) -> str:
    # 실제 포맷과 상관없이 항상 .jpg
    millis = int(at.timestamp()) * 1000 + at.microsecond // 1000
    return f"photo_{millis}.jpg"


class PhotoDoc(BaseModel):
    id: Optional[str] = None          # 저장 시 ObjectId 문자열로 채워짐
    image: bytes
    filename: str
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_upload(cls, image: bytes, at: Optional[datetime] = None) -> "PhotoDoc":
        at = at or utcnow()
        return cls(image=image, filename=photo_filename(at), timestamp=at)

    def to_mongo(self) -> dict:
        # _id 는 Mongo 가 발급
        return {"image": self.image, "filename": self.filename, "timestamp": self.timestamp}


# 목록 응답용 (image 제외)
class PhotoSummary(BaseModel):
    id: str
    filename: str
    timestamp: datetime


class UploadResult(BaseModel):
    success: bool
    message: str
