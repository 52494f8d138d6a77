"""
Order API

Split by concern:
- core: queries and response building
- crud: placing and reading orders
- actions: administrative listing and status changes
"""

from fastapi import APIRouter
from .crud import router as crud_router
from .actions import router as actions_router

router = APIRouter()

router.include_router(crud_router)
router.include_router(actions_router)
