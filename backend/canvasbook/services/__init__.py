"""서비스 레이어 패키지 초기화 모듈입니다."""

from canvasbook.services import (
    image_handler_service,
    canvas_service,
)
