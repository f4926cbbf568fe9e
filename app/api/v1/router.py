# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.modules.expenses.router import router as expenses_router
from app.config.settings import settings

# Main API v1 router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    expenses_router,
    prefix="/expenses",
    tags=["Expenses"]
)

@api_router.get("/")
async def api_root():
    """API v1 index"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "expenses": "/api/v1/expenses"
        }
    }
