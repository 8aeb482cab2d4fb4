from fastapi import APIRouter, FastAPI

from .admin import router as admin_router, scaffold_router as admin_scaffold_router
from .conversations import router as conversations_router, scaffold_router as conversations_scaffold_router
from .match import router as match_router, scaffold_router as match_scaffold_router
from .messages import router as messages_router, scaffold_router as messages_scaffold_router
from .profile import router as profile_router, scaffold_router as profile_scaffold_router
from .safety import router as safety_router, scaffold_router as safety_scaffold_router
from .subscription import router as subscription_router, scaffold_router as subscription_scaffold_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(profile_router, tags=["profiles"])
    app.include_router(match_router, tags=["matches"])
    app.include_router(conversations_router, tags=["conversations"])
    app.include_router(messages_router, tags=["messages"])
    app.include_router(subscription_router, tags=["subscription"])
    app.include_router(safety_router, tags=["moderation"])
    app.include_router(admin_router, tags=["admin"])

    app.include_router(profile_scaffold_router, prefix="/_scaffold/profile", tags=["scaffold-profile"])
    app.include_router(match_scaffold_router, prefix="/_scaffold/match", tags=["scaffold-match"])
    app.include_router(conversations_scaffold_router, prefix="/_scaffold/conversations", tags=["scaffold-conversations"])
    app.include_router(messages_scaffold_router, prefix="/_scaffold/messages", tags=["scaffold-messages"])
    app.include_router(subscription_scaffold_router, prefix="/_scaffold/subscription", tags=["scaffold-subscription"])
    app.include_router(safety_scaffold_router, prefix="/_scaffold/safety", tags=["scaffold-safety"])
    app.include_router(admin_scaffold_router, prefix="/_scaffold/admin", tags=["scaffold-admin"])


__all__ = ["include_modular_routers", "APIRouter"]
