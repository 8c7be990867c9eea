from fastapi import APIRouter

from app.api.v1 import (
    admins,
    announcements,
    content,
    drafts,
    products,
    promotions,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(promotions.router)
api_router.include_router(announcements.router)
api_router.include_router(content.router)
api_router.include_router(drafts.router)
api_router.include_router(products.router)
api_router.include_router(admins.router)
