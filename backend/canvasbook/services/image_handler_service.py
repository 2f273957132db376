"""Image Handler 도메인 서비스 레이어입니다. 캔버스 데이터의 인라인 이미지를 콘텐츠 주소 기반 파일로 분리하고 다시 인라인으로 복원합니다."""

import base64
import binascii
import hashlib
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from canvasbook.config import settings

logger = logging.getLogger(__name__)

IMAGE_FIELD = "src"
DATA_URL_PREFIX = "data:image/"
DATA_URL_MIME_RE = re.compile(r"^data:([^;]+);")


class ImageDataError(ValueError):
    """Inline image text under ``src`` that cannot be parsed or decoded."""


class ImageScopeError(ValueError):
    """Owner or collection identifier that is not a single safe path segment."""


@dataclass
class ImageLoadWarning:
    location: str
    reference: str
    reason: str


@dataclass
class CanvasLoadResult:
    data: Any
    warnings: list[ImageLoadWarning] = field(default_factory=list)


def scope_segment(value: Any) -> str:
    segment = str(value)
    if segment in {"", ".", ".."} or any(ch in segment for ch in ("/", "\\", "\x00")):
        raise ImageScopeError(f"unsafe storage scope identifier: {segment!r}")
    return segment


def _scope_dir(owner_id: Any, collection_id: Any) -> Path:
    return settings.storage_root() / scope_segment(owner_id) / scope_segment(collection_id)


def reference_prefix(owner_id: Any, collection_id: Any) -> str:
    return f"{settings.IMAGE_ROUTE_PREFIX.rstrip('/')}/{scope_segment(owner_id)}/{scope_segment(collection_id)}/"


async def ensure_storage_dir(owner_id: Any, collection_id: Any) -> Path:
    owner_dir = settings.storage_root() / scope_segment(owner_id)
    collection_dir = owner_dir / scope_segment(collection_id)
    await aiofiles.os.makedirs(owner_dir, exist_ok=True)
    await aiofiles.os.makedirs(collection_dir, exist_ok=True)
    return collection_dir


def parse_data_url(value: str) -> tuple[str, str]:
    """Split ``data:<mime>;base64,<payload>`` into ``(mime, payload)``."""
    header, sep, payload = value.partition(",")
    if not sep:
        raise ImageDataError("inline image data has no ',' separator")
    match = DATA_URL_MIME_RE.match(header)
    if not match:
        raise ImageDataError(f"inline image header is malformed: {header[:64]!r}")
    return match.group(1), payload


def extension_for_mime(mime_type: str) -> str:
    _, slash, subtype = mime_type.partition("/")
    if not slash or not subtype or "/" in subtype or "\\" in subtype:
        raise ImageDataError(f"cannot derive a file extension from mime type {mime_type!r}")
    return "jpg" if subtype == "jpeg" else subtype


def mime_subtype_for_extension(extension: str) -> str:
    return "jpeg" if extension == "jpg" else extension


def content_hash(payload: str) -> str:
    # base64 텍스트 자체를 해시한다. 디코딩된 바이트가 아니다.
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _join_location(location: str, key: Any) -> str:
    return f"{location}/{key}" if location else str(key)


async def _extract_image(value: str, scope_dir: Path, prefix: str) -> str:
    mime_type, payload = parse_data_url(value)
    filename = f"{content_hash(payload)}.{extension_for_mime(mime_type)}"
    path = scope_dir / filename

    if await aiofiles.os.path.exists(path):
        logger.debug("[image] reusing stored image %s", path)
    else:
        try:
            content = base64.b64decode(payload)
        except binascii.Error as exc:
            raise ImageDataError(f"inline image payload is not valid base64: {exc}") from exc
        async with aiofiles.open(path, "wb") as writer:
            await writer.write(content)
        logger.debug("[image] stored image %s (%d bytes)", path, len(content))

    return f"{prefix}{filename}"


async def _extract_node(node: Any, scope_dir: Path, prefix: str) -> Any:
    if isinstance(node, list):
        return [await _extract_node(item, scope_dir, prefix) for item in node]
    if isinstance(node, dict):
        result = {}
        for key, value in node.items():
            if key == IMAGE_FIELD and isinstance(value, str) and value.startswith(DATA_URL_PREFIX):
                result[key] = await _extract_image(value, scope_dir, prefix)
            else:
                result[key] = await _extract_node(value, scope_dir, prefix)
        return result
    return node


async def process_canvas_data(canvas_data: Any, owner_id: Any, collection_id: Any) -> Any:
    """Return a copy of ``canvas_data`` with every inline ``src`` image moved to storage.

    Each distinct payload is written once to ``<STORAGE_DIR>/<owner>/<collection>/<sha256>.<ext>``
    and the ``src`` value becomes ``/api/images/<owner>/<collection>/<filename>``.
    The input is never mutated. Unsafe scope identifiers raise ``ImageScopeError``,
    malformed inline image text raises ``ImageDataError``
    and filesystem errors propagate; no partially rewritten tree is returned.
    """
    if not isinstance(canvas_data, (dict, list)):
        return canvas_data

    scope_dir = await ensure_storage_dir(owner_id, collection_id)
    return await _extract_node(canvas_data, scope_dir, reference_prefix(owner_id, collection_id))


async def _inline_image(reference: str, scope_dir: Path) -> str:
    filename = reference.rsplit("/", 1)[-1]
    async with aiofiles.open(scope_dir / filename, "rb") as reader:
        content = await reader.read()
    _, _, extension = filename.partition(".")
    mime = mime_subtype_for_extension(extension)
    return f"data:image/{mime};base64,{base64.b64encode(content).decode('ascii')}"


async def _inline_node(
    node: Any,
    scope_dir: Path,
    prefix: str,
    location: str,
    warnings: list[ImageLoadWarning],
) -> Any:
    if isinstance(node, list):
        return [
            await _inline_node(item, scope_dir, prefix, _join_location(location, index), warnings)
            for index, item in enumerate(node)
        ]
    if isinstance(node, dict):
        result = {}
        for key, value in node.items():
            child_location = _join_location(location, key)
            if key == IMAGE_FIELD and isinstance(value, str) and value.startswith(prefix):
                try:
                    result[key] = await _inline_image(value, scope_dir)
                except (OSError, ValueError) as exc:
                    logger.warning("[image] failed to load image %s at %s: %s", value, child_location, exc)
                    warnings.append(ImageLoadWarning(location=child_location, reference=value, reason=str(exc)))
                    result[key] = value
            else:
                result[key] = await _inline_node(value, scope_dir, prefix, child_location, warnings)
        return result
    return node


async def load_canvas_data(canvas_data: Any, owner_id: Any, collection_id: Any) -> CanvasLoadResult:
    """Return a copy of ``canvas_data`` with this scope's image references inlined again.

    Unreadable files leave the reference in place and are reported in ``warnings``.
    References belonging to other scopes are passed through untouched.
    """
    if not isinstance(canvas_data, (dict, list)):
        return CanvasLoadResult(data=canvas_data)

    warnings: list[ImageLoadWarning] = []
    data = await _inline_node(
        canvas_data,
        _scope_dir(owner_id, collection_id),
        reference_prefix(owner_id, collection_id),
        "",
        warnings,
    )
    return CanvasLoadResult(data=data, warnings=warnings)


def resolve_image_path(owner_id: Any, collection_id: Any, filename: str) -> Path | None:
    root = settings.storage_root()
    try:
        scope_dir = _scope_dir(owner_id, collection_id).resolve()
    except ImageScopeError:
        return None
    if scope_dir.parent.parent != root:
        return None
    candidate = (scope_dir / filename).resolve()
    if candidate.parent != scope_dir or not candidate.is_file():
        return None
    return candidate
