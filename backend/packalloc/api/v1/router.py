"""
API v1 Router - Aggregates all endpoint routers
"""
from fastapi import APIRouter

from packalloc.api.v1.endpoints.allocations import router as allocations_router
from packalloc.api.v1.endpoints.receiving import router as receiving_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(allocations_router)
api_router.include_router(receiving_router)
