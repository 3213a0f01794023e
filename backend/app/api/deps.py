"""FastAPI dependencies shared by the route modules.

Tests replace ``get_storage`` and ``get_analyzer`` through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from app.ai.analyzer import ContentAnalyzer
from app.ai.analyzer_heuristic import HeuristicAnalyzer
from app.core.config import get_settings
from app.services.chat_service import ChatService
from app.services.materials_service import MaterialsService
from app.services.progress_service import ProgressService
from app.services.quiz_service import QuizService
from app.storage.base import Storage


def get_storage(request: Request) -> Storage:
    """Storage backend built during application startup."""
    return request.app.state.storage


def get_analyzer() -> ContentAnalyzer:
    """DelegatedAIAnalyzer when ANTHROPIC_API_KEY is set, else HeuristicAnalyzer."""
    settings = get_settings()
    if settings.anthropic_api_key:
        from app.ai.analyzer_ai import DelegatedAIAnalyzer

        return DelegatedAIAnalyzer(settings=settings)
    return HeuristicAnalyzer()


def get_progress_service(storage: Storage = Depends(get_storage)) -> ProgressService:
    return ProgressService(storage)


def get_chat_service(
    storage: Storage = Depends(get_storage),
    analyzer: ContentAnalyzer = Depends(get_analyzer),
) -> ChatService:
    return ChatService(storage, analyzer)


def get_materials_service(
    storage: Storage = Depends(get_storage),
    analyzer: ContentAnalyzer = Depends(get_analyzer),
) -> MaterialsService:
    return MaterialsService(storage, analyzer)


def get_quiz_service(
    storage: Storage = Depends(get_storage),
    analyzer: ContentAnalyzer = Depends(get_analyzer),
) -> QuizService:
    return QuizService(storage, analyzer)
