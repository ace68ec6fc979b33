"""Request models for the attempt endpoints."""

from typing import List, Optional

from pydantic import Field

from trainassess.common.schemas import AnswerValue, CamelModel, ScoreValue


class AnswerPayload(CamelModel):
    topic: str = ""
    question: str
    answer: AnswerValue
    type: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[AnswerValue] = None


class SubmitAttemptRequest(CamelModel):
    """
    Body of ``POST /attempts``.

    Answers may be sent as ``questionAnswers`` or ``answers``.
    """
    id: Optional[str] = Field(None, description="Attempt id, when saving a known attempt")
    question_set_id: str = Field(..., min_length=1)
    date: str = Field(..., description="Test date, YYYY-MM-DD")
    session_title: str = Field(..., min_length=1)
    question_answers: Optional[List[AnswerPayload]] = None
    answers: Optional[List[AnswerPayload]] = None
    overall_understanding: str = ""
    status: str = Field("submitted", description="in-progress or submitted")
    remarks: Optional[str] = ""

    def answer_documents(self) -> List[dict]:
        items = self.question_answers if self.question_answers is not None else self.answers
        return [item.to_document() for item in items or []]


class ScorePayload(CamelModel):
    score: ScoreValue
    feedback: Optional[str] = None


class EvaluationPayload(CamelModel):
    overall_feedback: Optional[str] = None


class EvaluateAttemptRequest(CamelModel):
    """Body of ``PUT /attempts/{id}``: one score per answer, in order."""
    question_answers: List[ScorePayload]
    evaluation: Optional[EvaluationPayload] = None

    @property
    def overall_feedback(self) -> Optional[str]:
        return self.evaluation.overall_feedback if self.evaluation else None
