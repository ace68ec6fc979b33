"""
Question-Set Catalog Service

Admins publish dated question-sets; trainees read the sets for a date to
render their test. Every upload is an independent insert, so several admins
may publish for the same date without coordination.
"""

from dataclasses import replace
from typing import Any, Dict, List, Sequence, Tuple

from trainassess.attempts.repository import AttemptRepository
from trainassess.common.auth import Identity
from trainassess.common.exceptions import ConflictError, NotFoundError, ValidationError
from trainassess.common.logger import LoggerAdapter, app_logger
from trainassess.common.timeutils import today, utcnow, validate_date
from trainassess.questions.models import Question, QuestionSet, QuestionType
from trainassess.questions.repository import QuestionSetRepository
from trainassess.store import DocumentStore

logger = LoggerAdapter(app_logger.getChild("questions"))

# Question types whose answers are picked from a list of options.
CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.CHOOSE_BEST)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def parse_questions(items: Sequence[Dict[str, Any]]) -> Tuple[Question, ...]:
    """
    Validate raw question dictionaries and build Question records.

    Args:
        items: Questions in their camelCase wire shape

    Raises:
        ValidationError: With every offending field path
    """
    if not items:
        raise ValidationError("At least one question is required", {"questions": "empty"})

    errors: Dict[str, str] = {}
    questions = []
    for index, item in enumerate(items):
        prefix = f"questions[{index}]"
        if _is_blank(item.get("topic")):
            errors[f"{prefix}.topic"] = "Topic is required"
        if _is_blank(item.get("question")):
            errors[f"{prefix}.question"] = "Question text is required"

        kind = item.get("type") or QuestionType.TEXT.value
        if kind not in QuestionType.values():
            errors[f"{prefix}.type"] = f"Type must be one of {QuestionType.values()}"
            continue

        options = item.get("options")
        if QuestionType(kind) in CHOICE_TYPES and (not options or len(options) < 2):
            errors[f"{prefix}.options"] = "At least two options are required"

        if not errors:
            questions.append(Question.from_dict(dict(item, type=kind)))

    if errors:
        raise ValidationError("Invalid questions", errors)
    return tuple(questions)


class QuestionSetService:
    """Service for authoring and reading question-sets."""

    def __init__(self, store: DocumentStore):
        self.question_sets = QuestionSetRepository(store)
        self.attempts = AttemptRepository(store)

    async def create(
        self,
        date: str,
        session_title: str,
        questions: Sequence[Dict[str, Any]],
        creator: Identity
    ) -> QuestionSet:
        """
        Publish a question-set.

        Args:
            date: Day the set is published for
            session_title: Title shown to trainees
            questions: Ordered questions, at least one
            creator: The admin publishing the set

        Returns:
            The stored QuestionSet
        """
        date = validate_date(date)
        if _is_blank(session_title):
            raise ValidationError("Session title is required", {"sessionTitle": "required"})

        question_set = QuestionSet(
            id=None,
            date=date,
            session_title=session_title.strip(),
            questions=parse_questions(questions),
            created_by=creator.id
        )
        created = await self.question_sets.create(question_set)
        logger.with_context(question_set_id=created.id, user_id=creator.id).info(
            f"Question-set created for {date} with {len(created.questions)} questions"
        )
        return created

    async def list_all(self) -> List[QuestionSet]:
        return await self.question_sets.list_all()

    async def list_by_date(self, date: str) -> List[QuestionSet]:
        return await self.question_sets.list_by_date(validate_date(date))

    async def list_today(self) -> List[QuestionSet]:
        return await self.question_sets.list_by_date(today())

    async def get(self, question_set_id: str) -> QuestionSet:
        question_set = await self.question_sets.get_by_id(question_set_id)
        if question_set is None:
            raise NotFoundError("Question set", question_set_id)
        return question_set

    async def update(self, question_set_id: str, changes: Dict[str, Any]) -> QuestionSet:
        """
        Update the date, title or questions of a set.

        Keys absent from ``changes`` (or set to None) are left unchanged.
        """
        current = await self.get(question_set_id)

        updates: Dict[str, Any] = {}
        if changes.get("date") is not None:
            updates["date"] = validate_date(changes["date"])
        if changes.get("sessionTitle") is not None:
            if _is_blank(changes["sessionTitle"]):
                raise ValidationError("Session title is required", {"sessionTitle": "required"})
            updates["session_title"] = changes["sessionTitle"].strip()
        if changes.get("questions") is not None:
            updates["questions"] = parse_questions(changes["questions"])

        updated = await self.question_sets.update(replace(current, updated_at=utcnow(), **updates))
        if updated is None:
            raise NotFoundError("Question set", question_set_id)

        logger.with_context(question_set_id=question_set_id).info(
            f"Question-set updated: {sorted(updates) or 'no changes'}"
        )
        return updated

    async def delete(self, question_set_id: str) -> None:
        """
        Delete a question-set.

        Raises:
            NotFoundError: If the set does not exist
            ConflictError: If attempts still reference the set
        """
        await self.get(question_set_id)

        attempt_count = await self.attempts.count_for_question_set(question_set_id)
        if attempt_count:
            raise ConflictError(
                "Question set has attempts and cannot be deleted",
                details={"attempts": attempt_count}
            )

        if not await self.question_sets.delete(question_set_id):
            raise NotFoundError("Question set", question_set_id)
        logger.with_context(question_set_id=question_set_id).info("Question-set deleted")
