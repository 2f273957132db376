"""책 단위 캔버스 데이터를 저장하는 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from canvasbook.database import Base


class CanvasDocument(Base):
    __tablename__ = "canvas_document"

    canvas_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(100), nullable=False)
    book_id = Column(String(100), nullable=False)
    data = Column(Text, nullable=False)  # JSON string, src 필드는 /api/images/... 참조 경로
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "book_id", name="uq_canvas_owner_book"),
    )
