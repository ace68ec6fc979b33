"""
Question-Set Models

This module defines dated question-sets and the questions they contain.
"""

import datetime
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from trainassess.common.timeutils import from_iso, to_iso, utcnow


class QuestionType(enum.Enum):
    """Kinds of question a set may contain."""
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple-choice"
    CHOOSE_BEST = "choose-best"
    TRUE_FALSE = "true-false"
    FILL_BLANK = "fill-blank"

    @classmethod
    def values(cls):
        return [kind.value for kind in cls]


@dataclass(frozen=True)
class Question:
    """A single topic/question pair with optional answer key."""
    topic: str
    question: str
    type: QuestionType = QuestionType.TEXT
    options: Optional[Tuple[str, ...]] = None
    correct_answer: Optional[Union[str, int, float]] = None
    explanation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "topic": self.topic,
            "question": self.question,
            "type": self.type.value
        }
        if self.options is not None:
            result["options"] = list(self.options)
        if self.correct_answer is not None:
            result["correctAnswer"] = self.correct_answer
        if self.explanation is not None:
            result["explanation"] = self.explanation
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        options = data.get("options")
        return cls(
            topic=data.get("topic", ""),
            question=data.get("question", ""),
            type=QuestionType(data.get("type") or QuestionType.TEXT.value),
            options=tuple(options) if options is not None else None,
            correct_answer=data.get("correctAnswer"),
            explanation=data.get("explanation")
        )


@dataclass(frozen=True)
class QuestionSet:
    """
    A dated, titled collection of questions.

    Dates are not unique: several admins may each publish a set for the
    same day.
    """
    id: Optional[str]
    date: str
    session_title: str
    questions: Tuple[Question, ...]
    created_by: Optional[str] = None
    created_at: datetime.datetime = field(default_factory=utcnow)
    updated_at: datetime.datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "sessionTitle": self.session_title,
            "questions": [question.to_dict() for question in self.questions],
            "createdBy": self.created_by,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionSet':
        return cls(
            id=data.get("id"),
            date=data["date"],
            session_title=data.get("sessionTitle", ""),
            questions=tuple(Question.from_dict(item) for item in data.get("questions", [])),
            created_by=data.get("createdBy"),
            created_at=from_iso(data.get("createdAt")) or utcnow(),
            updated_at=from_iso(data.get("updatedAt")) or utcnow()
        )
