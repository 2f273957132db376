"""Canvas 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel


class CanvasSave(BaseModel):
    data: Any


class ImageLoadWarningOut(BaseModel):
    location: str
    reference: str
    reason: str


class CanvasOut(BaseModel):
    canvas_id: int
    owner_id: str
    book_id: str
    data: Any
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    warnings: List[ImageLoadWarningOut] = []
