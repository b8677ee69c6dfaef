"""API v1 routes."""

from fastapi import APIRouter

from colloquy.api.v1 import auth, chat, conversations, dashboard, health, knowledge, projects

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(chat.router, prefix="/chat", tags=["chat"])
router.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(knowledge.router, prefix="/knowledge", tags=["knowledge"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
