from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_quiz_service, get_storage
from app.core.exceptions import RecordNotFoundError
from app.schemas.analysis import QuizAnswerRequest, QuizAnswerResponse, QuizGenerateRequest
from app.schemas.entities import QuizRecord
from app.services.quiz_service import QuizService
from app.storage.base import Storage

router = APIRouter()


@router.post("", response_model=QuizRecord, status_code=201)
async def generate_quiz(data: QuizGenerateRequest, service: QuizService = Depends(get_quiz_service)):
    return await service.generate(data.session_id, data.topic)


@router.get("", response_model=list[QuizRecord])
async def list_quizzes(session_id: int = Query(..., alias="sessionId"), storage: Storage = Depends(get_storage)):
    return await storage.list_quizzes_by_session(session_id)


@router.get("/{quiz_id}", response_model=QuizRecord)
async def get_quiz(quiz_id: int, storage: Storage = Depends(get_storage)):
    quiz = await storage.get_quiz(quiz_id)
    if quiz is None:
        raise RecordNotFoundError("Quiz", quiz_id)
    return quiz


@router.post("/{quiz_id}/answer", response_model=QuizAnswerResponse)
async def answer_question(
    quiz_id: int,
    data: QuizAnswerRequest,
    service: QuizService = Depends(get_quiz_service),
):
    try:
        return await service.answer(quiz_id, data.question_index, data.option_index)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
