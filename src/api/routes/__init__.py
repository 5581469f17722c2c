"""API routers, one per resource.

Everything under ``/api`` is mounted through ``api_router``; the cache
routes live at the root under ``/cache``.
"""

from fastapi import APIRouter

from src.api.routes import accounts, auth, billing, budget, transactions

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(accounts.router)
api_router.include_router(transactions.router)
api_router.include_router(billing.router)
api_router.include_router(budget.router)

__all__ = ["api_router"]
