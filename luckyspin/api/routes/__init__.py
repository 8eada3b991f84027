from fastapi import APIRouter

from .claim import router as claim_router
from .restaurant import router as restaurant_router
from .spin import router as spin_router

router = APIRouter(prefix="/api")
router.include_router(restaurant_router)
router.include_router(spin_router)
router.include_router(claim_router)

__all__ = ["router"]
