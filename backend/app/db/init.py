# app/db/init.py
# Mongo 연결 유틸 (motor)

from __future__ import annotations
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

log = logging.getLogger(__name__)


def init_db(uri: str, name: str) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    # motor 는 지연 연결이라 여기서는 URI 형식 오류만 발생
    # URI 에 DB 이름이 있으면 그걸 쓰고 (Atlas .../mydb), 없으면 name
    client = AsyncIOMotorClient(uri, tz_aware=True)
    return client, client.get_default_database(default=name)


async def ping_db(db: AsyncIOMotorDatabase) -> None:
    # 연결 확인 (준비 안 됐으면 예외)
    await db.command("ping")


def close_db(client: AsyncIOMotorClient | None) -> None:
    # 앱 종료 시 커넥션 정리
    if client is not None:
        client.close()
        log.info("MongoDB connection closed")
