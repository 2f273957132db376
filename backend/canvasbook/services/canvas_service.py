"""캔버스 저장/조회 도메인 서비스입니다. 저장 시 이미지를 분리하고 조회 시 다시 인라인으로 복원합니다."""

import json
import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from canvasbook.config import settings
from canvasbook.models.canvas import CanvasDocument
from canvasbook.services import image_handler_service
from canvasbook.services.image_handler_service import CanvasLoadResult, ImageDataError, ImageScopeError

logger = logging.getLogger(__name__)


def _check_scope(owner_id: str, book_id: str) -> None:
    try:
        image_handler_service.scope_segment(owner_id)
        image_handler_service.scope_segment(book_id)
    except ImageScopeError as exc:
        raise HTTPException(status_code=400, detail=f"잘못된 저장 범위입니다: {exc}") from exc


def _get_canvas_or_404(db: Session, owner_id: str, book_id: str) -> CanvasDocument:
    _check_scope(owner_id, book_id)
    row = (
        db.query(CanvasDocument)
        .filter(
            CanvasDocument.owner_id == owner_id,
            CanvasDocument.book_id == book_id,
        )
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="캔버스를 찾을 수 없습니다.")
    return row


async def save_canvas(db: Session, owner_id: str, book_id: str, data: Any) -> CanvasDocument:
    _check_scope(owner_id, book_id)
    raw = json.dumps(data, ensure_ascii=False)
    if len(raw.encode("utf-8")) > settings.MAX_CANVAS_SIZE:
        raise HTTPException(status_code=413, detail="캔버스 데이터가 허용 크기를 초과했습니다.")

    try:
        processed = await image_handler_service.process_canvas_data(data, owner_id, book_id)
    except ImageDataError as exc:
        raise HTTPException(status_code=400, detail=f"잘못된 이미지 데이터입니다: {exc}") from exc

    row = (
        db.query(CanvasDocument)
        .filter(
            CanvasDocument.owner_id == owner_id,
            CanvasDocument.book_id == book_id,
        )
        .first()
    )
    if row is None:
        row = CanvasDocument(owner_id=owner_id, book_id=book_id)
        db.add(row)
    row.data = json.dumps(processed, ensure_ascii=False)
    db.commit()
    db.refresh(row)
    logger.info("[canvas] saved canvas owner=%s book=%s", owner_id, book_id)
    return row


async def load_canvas(db: Session, owner_id: str, book_id: str, *, inline: bool = True) -> tuple[CanvasDocument, CanvasLoadResult]:
    row = _get_canvas_or_404(db, owner_id, book_id)
    stored = json.loads(row.data)
    if not inline:
        return row, CanvasLoadResult(data=stored)
    result = await image_handler_service.load_canvas_data(stored, owner_id, book_id)
    if result.warnings:
        logger.warning(
            "[canvas] loaded canvas owner=%s book=%s with %d unresolved image(s)",
            owner_id,
            book_id,
            len(result.warnings),
        )
    return row, result


def delete_canvas(db: Session, owner_id: str, book_id: str) -> None:
    # 저장된 이미지 파일은 삭제하지 않는다.
    row = _get_canvas_or_404(db, owner_id, book_id)
    db.delete(row)
    db.commit()
