# app/api/routes_page.py
# 갤러리 페이지: /photos 를 10초마다 다시 불러오는 정적 HTML
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

INDEX_HTML = Path(__file__).resolve().parent.parent / "static" / "index.html"

router = APIRouter(tags=["page"])


@router.get("/", response_class=HTMLResponse)
async def gallery_page():
    return HTMLResponse(INDEX_HTML.read_text(encoding="utf-8"))
