"""Main API router"""

from fastapi import APIRouter

from .routes import (
    admin, auth, bulk_analysis, clients, credits, line_items, orders, outreach, payments, publishers,
    share, users, websites,
)
from ..core.config import settings

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(line_items.router, prefix="/orders", tags=["line-items"])
api_router.include_router(share.router, prefix="/share", tags=["share"])
api_router.include_router(websites.router, prefix="/websites", tags=["websites"])
api_router.include_router(publishers.router, prefix="/publishers", tags=["publishers"])
api_router.include_router(bulk_analysis.router, prefix="/bulk-analysis", tags=["bulk-analysis"])
api_router.include_router(outreach.router, prefix="/outreach", tags=["outreach"])
api_router.include_router(credits.router, prefix="/credits", tags=["credits"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])


@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": "1.0.0"}


@api_router.get("/pricing")
async def get_pricing():
    """Fixed per-item fees (public endpoint)"""
    return {
        "service_fee": settings.SERVICE_FEE_CENTS,
        "client_review_fee": settings.CLIENT_REVIEW_FEE_CENTS,
        "rush_fee": settings.RUSH_FEE_CENTS,
        "currency": "USD",
        "prices_in_cents": True,
    }
