"""Images 기능 API 라우터입니다. 콘텐츠 주소로 저장된 캔버스 이미지를 제공합니다."""

import mimetypes

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from canvasbook.config import settings
from canvasbook.services import image_handler_service

router = APIRouter(prefix=settings.IMAGE_ROUTE_PREFIX, tags=["images"])


@router.get("/{owner_id}/{book_id}/{filename}")
def get_image(owner_id: str, book_id: str, filename: str):
    path = image_handler_service.resolve_image_path(owner_id, book_id, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="이미지를 찾을 수 없습니다.")
    extension = path.suffix[1:]
    media_type, _ = mimetypes.guess_type(path.name)
    if media_type is None:
        media_type = f"image/{image_handler_service.mime_subtype_for_extension(extension)}"
    return FileResponse(path, media_type=media_type)
