"""V1 API router"""
from fastapi import APIRouter

from wholesale.api.api_v1.endpoints import pricing, credit
from wholesale.api.api_v1.endpoints.orders import router as orders_router

api_router = APIRouter()

api_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
api_router.include_router(pricing.router, prefix="/pricing", tags=["Pricing"])
api_router.include_router(credit.router, prefix="/credit", tags=["Credit"])
