"""
Question-Set API Router

Trainees read the sets published for a date; admins publish, edit and
remove them.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import Field

from trainassess.api import APIResponse
from trainassess.common.auth import Identity, Operation, require
from trainassess.common.schemas import AnswerValue, CamelModel
from trainassess.questions.service import QuestionSetService

router = APIRouter()


# Request Models
class QuestionPayload(CamelModel):
    topic: str
    question: str
    type: Optional[str] = Field(None, description="text, multiple-choice, choose-best, true-false or fill-blank")
    options: Optional[List[str]] = None
    correct_answer: Optional[AnswerValue] = None
    explanation: Optional[str] = None


class CreateQuestionSetRequest(CamelModel):
    date: str = Field(..., description="Publication date, YYYY-MM-DD")
    session_title: str
    questions: List[QuestionPayload]


class UpdateQuestionSetRequest(CamelModel):
    date: Optional[str] = None
    session_title: Optional[str] = None
    questions: Optional[List[QuestionPayload]] = None


def get_question_set_service(request: Request) -> QuestionSetService:
    return request.app.state.question_set_service


@router.get("")
async def list_question_sets(
    identity: Identity = Depends(require(Operation.VIEW_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> List[Dict[str, Any]]:
    return [question_set.to_dict() for question_set in await service.list_all()]


@router.get("/today")
async def list_todays_question_sets(
    identity: Identity = Depends(require(Operation.VIEW_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> List[Dict[str, Any]]:
    return [question_set.to_dict() for question_set in await service.list_today()]


@router.get("/date/{date}")
async def list_question_sets_by_date(
    date: str,
    identity: Identity = Depends(require(Operation.VIEW_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> List[Dict[str, Any]]:
    return [question_set.to_dict() for question_set in await service.list_by_date(date)]


@router.get("/{question_set_id}")
async def get_question_set(
    question_set_id: str,
    identity: Identity = Depends(require(Operation.VIEW_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> Dict[str, Any]:
    return (await service.get(question_set_id)).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question_set(
    payload: CreateQuestionSetRequest,
    identity: Identity = Depends(require(Operation.MANAGE_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> Dict[str, Any]:
    question_set = await service.create(
        date=payload.date,
        session_title=payload.session_title,
        questions=[question.to_document() for question in payload.questions],
        creator=identity
    )
    return question_set.to_dict()


@router.put("/{question_set_id}")
async def update_question_set(
    question_set_id: str,
    payload: UpdateQuestionSetRequest,
    identity: Identity = Depends(require(Operation.MANAGE_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> Dict[str, Any]:
    question_set = await service.update(question_set_id, payload.to_document())
    return question_set.to_dict()


@router.delete("/{question_set_id}")
async def delete_question_set(
    question_set_id: str,
    identity: Identity = Depends(require(Operation.MANAGE_QUESTION_SETS)),
    service: QuestionSetService = Depends(get_question_set_service)
) -> Dict[str, Any]:
    await service.delete(question_set_id)
    return APIResponse.success(message="Question set deleted successfully")
