"""
Attempt API Router

Endpoints for saving, submitting, listing and evaluating attempts.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError

from trainassess.api import APIResponse
from trainassess.attempts.schemas import EvaluateAttemptRequest, SubmitAttemptRequest
from trainassess.attempts.service import AttemptService
from trainassess.common.auth import Identity, Operation, require
from trainassess.common.exceptions import ValidationError

router = APIRouter()

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def get_attempt_service(request: Request) -> AttemptService:
    return request.app.state.attempt_service


async def parse_body(request: Request, model: Type[ModelT]) -> ModelT:
    """Parse a JSON request body into a request model."""
    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid request data", {"body": "Request body must be valid JSON"}) from e
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise RequestValidationError(e.errors()) from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_attempt(
    payload: SubmitAttemptRequest,
    response: Response,
    identity: Identity = Depends(require(Operation.SUBMIT_ATTEMPT)),
    service: AttemptService = Depends(get_attempt_service)
) -> Dict[str, Any]:
    """
    Save or submit the caller's attempt for a date.

    Answers 201 when the attempt was created and 200 when an existing
    attempt was updated.
    """
    attempt, created = await service.submit(
        identity,
        question_set_id=payload.question_set_id,
        date=payload.date,
        session_title=payload.session_title,
        answers=payload.answer_documents(),
        overall_understanding=payload.overall_understanding,
        status=payload.status,
        remarks=payload.remarks,
        attempt_id=payload.id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return attempt.to_dict()


@router.get("/mine")
@router.get("/my", include_in_schema=False)
async def list_my_attempts(
    identity: Identity = Depends(require(Operation.LIST_OWN_ATTEMPTS)),
    service: AttemptService = Depends(get_attempt_service)
) -> List[Dict[str, Any]]:
    return [attempt.to_dict() for attempt in await service.list_for_user(identity)]


@router.get("")
async def list_attempts(
    date: Optional[str] = Query(None, description="Only attempts for this date"),
    identity: Identity = Depends(require(Operation.LIST_ATTEMPTS)),
    service: AttemptService = Depends(get_attempt_service)
) -> List[Dict[str, Any]]:
    return [attempt.to_dict() for attempt in await service.list_all(date)]


@router.get("/{attempt_id}")
async def get_attempt(
    attempt_id: str,
    identity: Identity = Depends(require(Operation.VIEW_ATTEMPT)),
    service: AttemptService = Depends(get_attempt_service)
) -> Dict[str, Any]:
    attempt = await service.get(attempt_id, identity)
    return attempt.to_dict()


@router.put("/{attempt_id}")
async def evaluate_attempt(
    attempt_id: str,
    request: Request,
    identity: Identity = Depends(require(Operation.EVALUATE_ATTEMPT)),
    service: AttemptService = Depends(get_attempt_service)
) -> Dict[str, Any]:
    """
    Grade an attempt; repeating the call replaces the previous grade.

    The body is parsed only after the caller is authorized.
    """
    payload = await parse_body(request, EvaluateAttemptRequest)
    attempt = await service.evaluate(
        attempt_id,
        scores=[item.to_document() for item in payload.question_answers],
        evaluator=identity,
        overall_feedback=payload.overall_feedback
    )
    return attempt.to_dict()


@router.delete("/{attempt_id}")
async def delete_attempt(
    attempt_id: str,
    identity: Identity = Depends(require(Operation.DELETE_ATTEMPT)),
    service: AttemptService = Depends(get_attempt_service)
) -> Dict[str, Any]:
    await service.delete(attempt_id)
    return APIResponse.success(message="Attempt deleted successfully")
