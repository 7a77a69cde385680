# API module - routers and error mapping
from fastapi import APIRouter

from .admin import router as admin_router
from .auth import router as auth_router
from .claims import router as claims_router
from .errors import register_error_handlers
from .items import router as items_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(items_router)
router.include_router(claims_router)
router.include_router(admin_router)

__all__ = ["router", "register_error_handlers"]
