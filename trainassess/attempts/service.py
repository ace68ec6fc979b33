"""
Attempt Lifecycle Service

This module owns the creation and transitions of attempts:

- trainees save and submit their answers for a date (``submit``), with at
  most one attempt per trainee and date;
- evaluators grade submitted attempts (``evaluate``), which may be repeated
  to overwrite a previous grade;
- evaluated attempts can no longer be changed by the trainee.

Every transition builds a new Attempt record and writes it back with the
version it was read at, so a concurrent write surfaces as a ConflictError
instead of being lost.
"""

import math
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from trainassess.attempts import grading
from trainassess.attempts.models import (
    TRAINEE_STATUSES,
    Attempt,
    AttemptStatus,
    Evaluation,
    QuestionAnswer,
    QuestionScore
)
from trainassess.attempts.repository import AttemptRepository
from trainassess.common.auth import Identity, InsufficientPermissionsError, Operation
from trainassess.common.exceptions import ConflictError, NotFoundError, ValidationError
from trainassess.common.logger import LoggerAdapter, app_logger
from trainassess.common.timeutils import utcnow, validate_date
from trainassess.questions.repository import QuestionSetRepository
from trainassess.store import DocumentStore

logger = LoggerAdapter(app_logger.getChild("attempts"))

ALREADY_EVALUATED_MESSAGE = "Test has already been evaluated and cannot be resubmitted"

# Namespace for attempt ids derived from (user, date).
ATTEMPT_NAMESPACE = uuid.UUID("5b8f0a52-6a3e-4c1e-9d7a-2f4b6c1e8a90")


def attempt_id_for(user_id: str, date: str) -> str:
    """
    Derive the id of a trainee's attempt for a date.

    A deterministic id makes a second concurrent create for the same
    (user, date) collide in the store instead of producing a duplicate.
    """
    return uuid.uuid5(ATTEMPT_NAMESPACE, f"{user_id}/{date}").hex


def _is_valid_answer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not math.isnan(value)
    return isinstance(value, str) and bool(value.strip())


def parse_answers(items: Sequence[Dict[str, Any]]) -> Tuple[QuestionAnswer, ...]:
    """
    Validate raw answer dictionaries and build QuestionAnswer records.

    Scores and feedback sent by a trainee are dropped; only evaluators
    set them.

    Raises:
        ValidationError: If the list is empty or any answer is malformed
    """
    if not items:
        raise ValidationError("At least one answer is required", {"questionAnswers": "empty"})

    errors: Dict[str, str] = {}
    for index, item in enumerate(items):
        prefix = f"questionAnswers[{index}]"
        if not isinstance(item.get("question"), str) or not item["question"].strip():
            errors[f"{prefix}.question"] = "Question text is required"
        if not isinstance(item.get("topic"), str):
            errors[f"{prefix}.topic"] = "Topic is required"
        if not _is_valid_answer(item.get("answer")):
            errors[f"{prefix}.answer"] = "Answer must be a non-empty string or a number"
    if errors:
        raise ValidationError("Invalid answers", errors)

    return tuple(
        replace(QuestionAnswer.from_dict(item), score=None, feedback=None)
        for item in items
    )


def parse_status(value: Union[str, AttemptStatus]) -> AttemptStatus:
    """Resolve a status a trainee asked for; only in-progress and submitted are accepted."""
    try:
        status = value if isinstance(value, AttemptStatus) else AttemptStatus(value)
    except ValueError:
        status = None
    if status not in TRAINEE_STATUSES:
        allowed = [s.value for s in TRAINEE_STATUSES]
        raise ValidationError("Invalid status", {"status": f"Status must be one of {allowed}"})
    return status


class AttemptService:
    """
    Service for the attempt lifecycle and its evaluation.

    Attributes:
        attempts: Repository of attempts
        question_sets: Repository used to check referenced question-sets exist
        max_score_per_question: Upper bound of a single question's score
    """

    def __init__(self, store: DocumentStore, max_score_per_question: int = grading.DEFAULT_MAX_SCORE_PER_QUESTION):
        self.attempts = AttemptRepository(store)
        self.question_sets = QuestionSetRepository(store)
        self.max_score_per_question = max_score_per_question

    async def submit(
        self,
        identity: Identity,
        question_set_id: str,
        date: str,
        session_title: str,
        answers: Sequence[Dict[str, Any]],
        overall_understanding: str = "",
        status: Union[str, AttemptStatus] = AttemptStatus.SUBMITTED,
        remarks: str = "",
        attempt_id: Optional[str] = None
    ) -> Tuple[Attempt, bool]:
        """
        Create or update the caller's attempt for a date.

        Args:
            identity: The trainee saving the attempt
            question_set_id: Question-set being answered
            date: Day of the test
            session_title: Title of the session
            answers: Ordered answers, at least one
            overall_understanding: Trainee's self-assessment
            status: ``in-progress`` for an autosave, ``submitted`` to hand in
            remarks: Optional remarks
            attempt_id: Id of the attempt being saved, when the client holds it

        Returns:
            The stored attempt and whether it was created

        Raises:
            InsufficientPermissionsError: If the caller is not a trainee
            ValidationError: For malformed input
            NotFoundError: If the question-set or the given attempt does not exist
            ConflictError: If the attempt was already evaluated or changed concurrently
        """
        if not identity.is_trainee:
            raise InsufficientPermissionsError(
                "Only trainees can submit attempts", Operation.SUBMIT_ATTEMPT.value
            )
        date = validate_date(date)
        if not isinstance(session_title, str) or not session_title.strip():
            raise ValidationError("Invalid session title", {"sessionTitle": "Session title is required"})
        target_status = parse_status(status)
        question_answers = parse_answers(answers)

        if await self.question_sets.get_by_id(question_set_id) is None:
            raise NotFoundError("Question set", question_set_id)

        log = logger.with_context(user_id=identity.id, date=date)
        values = dict(
            question_set_id=question_set_id,
            session_title=session_title.strip(),
            question_answers=question_answers,
            overall_understanding=overall_understanding or "",
            status=target_status,
            remarks=remarks or ""
        )

        existing = await self._find_existing(identity, date, attempt_id)
        if existing is None:
            now = utcnow()
            attempt = Attempt(
                id=attempt_id_for(identity.id, date),
                user_id=identity.id,
                date=date,
                submitted_at=now if target_status == AttemptStatus.SUBMITTED else None,
                created_at=now,
                updated_at=now,
                **values
            )
            try:
                created = await self.attempts.create(attempt)
            except ConflictError:
                # Another request created the attempt first; update it instead.
                existing = await self.attempts.get_for_user_and_date(identity.id, date)
                if existing is None:
                    raise
            else:
                log.info(f"Attempt created with status {target_status.value}")
                return created, True

        updated = await self._overwrite(existing, values)
        log.info(f"Attempt {updated.id} saved with status {target_status.value}")
        return updated, False

    async def _find_existing(
        self,
        identity: Identity,
        date: str,
        attempt_id: Optional[str]
    ) -> Optional[Attempt]:
        if attempt_id is None:
            return await self.attempts.get_for_user_and_date(identity.id, date)

        attempt = await self.attempts.get_by_id(attempt_id)
        if attempt is None:
            raise NotFoundError("Attempt", attempt_id)
        if attempt.user_id != identity.id:
            raise InsufficientPermissionsError(
                "Attempt belongs to another user", Operation.SUBMIT_ATTEMPT.value
            )
        if attempt.date != date:
            raise ValidationError("Attempt date mismatch", {"date": f"Attempt {attempt_id} is for {attempt.date}"})
        return attempt

    async def _overwrite(self, existing: Attempt, values: Dict[str, Any]) -> Attempt:
        if existing.is_evaluated or existing.status == AttemptStatus.EVALUATED:
            raise ConflictError(ALREADY_EVALUATED_MESSAGE, details={"id": existing.id})

        now = utcnow()
        submitted_at = existing.submitted_at
        if values["status"] == AttemptStatus.SUBMITTED:
            submitted_at = now

        updated = await self.attempts.update(
            replace(existing, submitted_at=submitted_at, updated_at=now, **values)
        )
        if updated is None:
            raise NotFoundError("Attempt", existing.id)
        return updated

    async def evaluate(
        self,
        attempt_id: str,
        scores: Sequence[Dict[str, Any]],
        evaluator: Identity,
        overall_feedback: Optional[str] = None
    ) -> Attempt:
        """
        Grade an attempt.

        Calling this again on an evaluated attempt replaces the previous
        evaluation and every per-question score and feedback.

        Args:
            attempt_id: Attempt to grade
            scores: One ``{"score", "feedback"?}`` entry per answer, in order
            evaluator: The admin or superadmin grading
            overall_feedback: Optional feedback on the whole attempt

        Returns:
            The evaluated attempt

        Raises:
            InsufficientPermissionsError: If the evaluator is not staff
            NotFoundError: If the attempt does not exist
            ConflictError: If the attempt is still in progress
            ValidationError: If the scores do not match the answers or are out of range
        """
        if not evaluator.is_staff:
            raise InsufficientPermissionsError(
                "Only admins can evaluate attempts", Operation.EVALUATE_ATTEMPT.value
            )

        attempt = await self.attempts.get_by_id(attempt_id)
        if attempt is None:
            raise NotFoundError("Attempt", attempt_id)
        if attempt.status == AttemptStatus.IN_PROGRESS:
            raise ConflictError("Attempt has not been submitted yet", details={"id": attempt_id})

        if len(scores) != len(attempt.question_answers):
            raise ValidationError(
                "Score count does not match answer count",
                {"questionAnswers": f"Expected {len(attempt.question_answers)} scores, got {len(scores)}"}
            )

        feedback_errors = {
            f"questionAnswers[{index}].feedback": "Feedback must be a string"
            for index, item in enumerate(scores)
            if item.get("feedback") is not None and not isinstance(item["feedback"], str)
        }
        if feedback_errors:
            raise ValidationError("Invalid feedback", feedback_errors)

        question_scores = tuple(
            QuestionScore(score=item.get("score"), feedback=item.get("feedback"))
            for item in scores
        )
        summary = grading.summarize(
            [item.score for item in question_scores],
            self.max_score_per_question
        )

        now = utcnow()
        evaluation = Evaluation(
            total_score=summary.total_score,
            max_score=summary.max_score,
            percentage=summary.percentage,
            grade=summary.grade,
            evaluated_by=evaluator.display_name,
            evaluator_id=evaluator.id,
            evaluated_at=now,
            overall_feedback=overall_feedback,
            question_feedback=question_scores
        )
        graded_answers = tuple(
            answer.graded(item.score, item.feedback)
            for answer, item in zip(attempt.question_answers, question_scores)
        )

        updated = await self.attempts.update(replace(
            attempt,
            question_answers=graded_answers,
            evaluation=evaluation,
            status=AttemptStatus.EVALUATED,
            updated_at=now
        ))
        if updated is None:
            raise NotFoundError("Attempt", attempt_id)

        logger.with_context(attempt_id=attempt_id, evaluator_id=evaluator.id).info(
            f"Attempt evaluated: {summary.total_score}/{summary.max_score} "
            f"({summary.percentage}%, {summary.grade})"
        )
        return updated

    async def list_for_user(self, identity: Identity) -> List[Attempt]:
        return await self.attempts.list_for_user(identity.id)

    async def list_all(self, date: Optional[str] = None) -> List[Attempt]:
        """List every attempt, optionally for a single date."""
        if date is not None:
            date = validate_date(date)
        return await self.attempts.list_all(date)

    async def get(self, attempt_id: str, identity: Identity) -> Attempt:
        """
        Get an attempt; trainees may only read their own.

        Raises:
            NotFoundError: If the attempt does not exist
            InsufficientPermissionsError: If a trainee asks for another user's attempt
        """
        attempt = await self.attempts.get_by_id(attempt_id)
        if attempt is None:
            raise NotFoundError("Attempt", attempt_id)
        if identity.is_trainee and attempt.user_id != identity.id:
            raise InsufficientPermissionsError(
                "Attempt belongs to another user", Operation.VIEW_ATTEMPT.value
            )
        return attempt

    async def delete(self, attempt_id: str) -> None:
        if not await self.attempts.delete(attempt_id):
            raise NotFoundError("Attempt", attempt_id)
        logger.with_context(attempt_id=attempt_id).info("Attempt deleted")
