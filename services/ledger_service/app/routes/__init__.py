from fastapi import APIRouter, FastAPI

from . import admin, deposits, orders, system, users, wallet


def register_routes(app: FastAPI) -> None:
    router = APIRouter(prefix="/api/v1")
    router.include_router(users.router, prefix="/users", tags=["users"])
    router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
    router.include_router(deposits.router, prefix="/deposits", tags=["deposits"])
    router.include_router(orders.router, prefix="/orders", tags=["orders"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    router.include_router(system.router, tags=["system"])
    app.include_router(router)
