# Services package

from app.services.notices import Notice, NoticeLevel

__all__ = [
    "Notice",
    "NoticeLevel",
]
