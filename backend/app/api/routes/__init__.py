from fastapi import APIRouter

from app.api.routes import chat, gaps, health, materials, messages, personas, quizzes, sessions, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(personas.router, prefix="/personas", tags=["personas"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(materials.router, prefix="/materials", tags=["materials"])
api_router.include_router(gaps.router, prefix="/gaps", tags=["gaps"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
