"""
Attempt Models

This module defines the attempt, its answer records and the embedded
evaluation. All three are immutable value records: every lifecycle
transition builds a new instance rather than mutating the stored one.

Dictionaries produced by ``to_dict`` use the camelCase document shape that
is both persisted and returned to API clients.
"""

import datetime
import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from trainassess.common.timeutils import from_iso, to_iso, utcnow

AnswerValue = Union[str, int, float]
Score = Union[int, float]


class AttemptStatus(enum.Enum):
    """Lifecycle states of an attempt."""
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"
    EVALUATED = "evaluated"


# Statuses a trainee may request when saving an attempt.
TRAINEE_STATUSES = (AttemptStatus.IN_PROGRESS, AttemptStatus.SUBMITTED)


def _optional_tuple(values: Optional[Sequence[Any]]) -> Optional[Tuple[Any, ...]]:
    return tuple(values) if values is not None else None


@dataclass(frozen=True)
class QuestionAnswer:
    """
    A trainee's answer to one question, with the evaluator's score once graded.

    ``options`` and ``correct_answer`` are echoed from the question-set so a
    graded attempt can be displayed on its own.
    """
    topic: str
    question: str
    answer: AnswerValue
    type: Optional[str] = None
    options: Optional[Tuple[str, ...]] = None
    correct_answer: Optional[AnswerValue] = None
    score: Optional[Score] = None
    feedback: Optional[str] = None

    def graded(self, score: Score, feedback: Optional[str]) -> 'QuestionAnswer':
        return replace(self, score=score, feedback=feedback)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "topic": self.topic,
            "question": self.question,
            "answer": self.answer
        }
        if self.type is not None:
            result["type"] = self.type
        if self.options is not None:
            result["options"] = list(self.options)
        if self.correct_answer is not None:
            result["correctAnswer"] = self.correct_answer
        if self.score is not None:
            result["score"] = self.score
        if self.feedback is not None:
            result["feedback"] = self.feedback
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionAnswer':
        return cls(
            topic=data.get("topic", ""),
            question=data.get("question", ""),
            answer=data.get("answer", ""),
            type=data.get("type"),
            options=_optional_tuple(data.get("options")),
            correct_answer=data.get("correctAnswer"),
            score=data.get("score"),
            feedback=data.get("feedback")
        )


@dataclass(frozen=True)
class QuestionScore:
    """Score and feedback given to one question by an evaluator."""
    score: Score
    feedback: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"score": self.score}
        if self.feedback is not None:
            result["feedback"] = self.feedback
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionScore':
        return cls(score=data["score"], feedback=data.get("feedback"))


@dataclass(frozen=True)
class Evaluation:
    """
    Graded outcome attached to an attempt.

    Attributes:
        total_score: Sum of per-question scores
        max_score: Question count times the per-question maximum
        percentage: Rounded ``100 * total_score / max_score``
        grade: Letter grade derived from the percentage
        evaluated_by: Evaluator display name
        evaluator_id: Evaluator user id
        evaluated_at: When the evaluation was recorded
        overall_feedback: Optional free-text feedback
        question_feedback: Per-question scores and feedback, in answer order
    """
    total_score: Score
    max_score: int
    percentage: int
    grade: str
    evaluated_by: str
    evaluator_id: str
    evaluated_at: datetime.datetime
    overall_feedback: Optional[str] = None
    question_feedback: Tuple[QuestionScore, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "totalScore": self.total_score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "grade": self.grade,
            "evaluatedBy": self.evaluated_by,
            "evaluatorId": self.evaluator_id,
            "evaluatedAt": to_iso(self.evaluated_at),
            "questionFeedback": [item.to_dict() for item in self.question_feedback]
        }
        if self.overall_feedback is not None:
            result["overallFeedback"] = self.overall_feedback
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Evaluation':
        return cls(
            total_score=data["totalScore"],
            max_score=data["maxScore"],
            percentage=data["percentage"],
            grade=data["grade"],
            evaluated_by=data.get("evaluatedBy", ""),
            evaluator_id=data.get("evaluatorId", ""),
            evaluated_at=from_iso(data.get("evaluatedAt")),
            overall_feedback=data.get("overallFeedback"),
            question_feedback=tuple(
                QuestionScore.from_dict(item) for item in data.get("questionFeedback", [])
            )
        )


@dataclass(frozen=True)
class Attempt:
    """
    A trainee's answer-set for one question-set and date.

    At most one attempt exists per (user, date); ``version`` is maintained by
    the document store and guards against lost updates.
    """
    id: Optional[str]
    user_id: str
    question_set_id: str
    date: str
    session_title: str
    question_answers: Tuple[QuestionAnswer, ...]
    status: AttemptStatus
    overall_understanding: str = ""
    remarks: str = ""
    submitted_at: Optional[datetime.datetime] = None
    evaluation: Optional[Evaluation] = None
    version: int = 0
    created_at: datetime.datetime = field(default_factory=utcnow)
    updated_at: datetime.datetime = field(default_factory=utcnow)

    @property
    def is_evaluated(self) -> bool:
        return self.evaluation is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "userId": self.user_id,
            "questionSetId": self.question_set_id,
            "date": self.date,
            "sessionTitle": self.session_title,
            "questionAnswers": [answer.to_dict() for answer in self.question_answers],
            "overallUnderstanding": self.overall_understanding,
            "status": self.status.value,
            "remarks": self.remarks,
            "submittedAt": to_iso(self.submitted_at),
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "version": self.version,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at)
        }
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attempt':
        evaluation = data.get("evaluation")
        return cls(
            id=data.get("id"),
            user_id=data["userId"],
            question_set_id=data["questionSetId"],
            date=data["date"],
            session_title=data.get("sessionTitle", ""),
            question_answers=tuple(
                QuestionAnswer.from_dict(item) for item in data.get("questionAnswers", [])
            ),
            status=AttemptStatus(data.get("status", AttemptStatus.IN_PROGRESS.value)),
            overall_understanding=data.get("overallUnderstanding") or "",
            remarks=data.get("remarks") or "",
            submitted_at=from_iso(data.get("submittedAt")),
            evaluation=Evaluation.from_dict(evaluation) if evaluation else None,
            version=data.get("version", 0),
            created_at=from_iso(data.get("createdAt")) or utcnow(),
            updated_at=from_iso(data.get("updatedAt")) or utcnow()
        )
