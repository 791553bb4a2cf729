from fastapi import APIRouter

from .chat import router as chat_router
from .documents import router as documents_router
from .files import router as files_router
from .health import router as health_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(chat_router)
router.include_router(files_router)
router.include_router(documents_router)
