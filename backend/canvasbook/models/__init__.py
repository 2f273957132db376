"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from canvasbook.models.canvas import CanvasDocument

__all__ = [
    "CanvasDocument",
]
