"""API router initialization."""

# Hey future me - the routers are mounted at the ROOT, not under /api. Mobile clients in the
# field call /login, /refresh-token, /folders ... directly, so moving them would break every
# installed app. auth, subscriptions and files define full paths, the others get a prefix.

from fastapi import APIRouter

from notive.api.routers import auth, conversations, files, folders, health, subscriptions

api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(subscriptions.router, tags=["Subscriptions"])
api_router.include_router(folders.router, prefix="/folders", tags=["Folders"])
api_router.include_router(files.router, tags=["Files"])
api_router.include_router(
    conversations.router, prefix="/conversations", tags=["Conversations"]
)
api_router.include_router(health.router, prefix="/health", tags=["Health"])

__all__ = ["api_router"]
