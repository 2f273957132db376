"""Canvases 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from canvasbook.database import get_db
from canvasbook.models.canvas import CanvasDocument
from canvasbook.schemas.canvas import CanvasOut, CanvasSave
from canvasbook.services import canvas_service
from canvasbook.services.image_handler_service import CanvasLoadResult

router = APIRouter(prefix="/api/canvases", tags=["canvases"])


def _canvas_out(row: CanvasDocument, result: CanvasLoadResult) -> dict:
    return {
        "canvas_id": row.canvas_id,
        "owner_id": row.owner_id,
        "book_id": row.book_id,
        "data": result.data,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "warnings": [asdict(w) for w in result.warnings],
    }


@router.put("/{owner_id}/{book_id}", response_model=CanvasOut)
async def save_canvas(
    owner_id: str,
    book_id: str,
    payload: CanvasSave,
    db: Session = Depends(get_db),
):
    row = await canvas_service.save_canvas(db, owner_id, book_id, payload.data)
    return _canvas_out(row, CanvasLoadResult(data=json.loads(row.data)))


@router.get("/{owner_id}/{book_id}", response_model=CanvasOut)
async def get_canvas(
    owner_id: str,
    book_id: str,
    inline: bool = True,
    db: Session = Depends(get_db),
):
    row, result = await canvas_service.load_canvas(db, owner_id, book_id, inline=inline)
    return _canvas_out(row, result)


@router.delete("/{owner_id}/{book_id}")
def delete_canvas(
    owner_id: str,
    book_id: str,
    db: Session = Depends(get_db),
):
    canvas_service.delete_canvas(db, owner_id, book_id)
    return {"message": "삭제되었습니다."}
