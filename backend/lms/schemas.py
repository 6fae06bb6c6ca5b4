"""Pydantic models for question payloads and API request/response schemas."""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models.enums import AssessmentType


# Question payloads stored in Assessment.questions

class MultipleChoiceQuestion(BaseModel):
    id: str
    type: Literal["multiple-choice"]
    text: str = Field("", validation_alias=AliasChoices("text", "question"))
    options: List[str] = []
    correct_answer_index: Optional[int] = Field(
        None, validation_alias=AliasChoices("correct_answer_index", "correctAnswerIndex")
    )
    correct_answer: Optional[str] = Field(
        None, validation_alias=AliasChoices("correct_answer", "correctAnswer")
    )
    points: int = Field(0, ge=0)

    @property
    def has_key(self) -> bool:
        return self.correct_answer_index is not None or bool(self.correct_answer)

    def accepted_answers(self) -> set[str]:
        """Recorded answers that count as correct.

        With options, only the keyed option text matches; a bare index is
        accepted only for questions that carry no options.
        """
        accepted = set()
        if self.correct_answer_index is not None:
            if not self.options:
                accepted.add(str(self.correct_answer_index))
            elif 0 <= self.correct_answer_index < len(self.options):
                accepted.add(self.options[self.correct_answer_index])
        if self.correct_answer:
            accepted.add(self.correct_answer)
        return accepted

    def is_correct(self, answer) -> bool:
        if answer is None or not self.has_key:
            return False
        return str(answer) in self.accepted_answers()


class TextQuestion(BaseModel):
    id: str
    type: Literal["text"]
    text: str = Field("", validation_alias=AliasChoices("text", "question"))
    points: int = Field(0, ge=0)


Question = Annotated[Union[MultipleChoiceQuestion, TextQuestion], Field(discriminator="type")]


# Submissions

class SubmissionCreate(BaseModel):
    assessment_id: str
    answers: Dict[str, Union[str, int]] = {}
    file_url: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)


class SubmissionResponse(BaseModel):
    id: str
    assessment_id: str
    student_id: str
    answers: Dict[str, Union[str, int]] = {}
    auto_grade: Optional[int] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    file_url: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    state: str

    model_config = ConfigDict(from_attributes=True)

    @field_validator("state", mode="before")
    @classmethod
    def state_value(cls, v):
        return getattr(v, "value", v)


class GradeEntry(BaseModel):
    grade: int
    feedback: Optional[str] = None


# Progress

class ModuleCompletionResponse(BaseModel):
    module_id: str
    student_id: str
    completion: int


class CompletionCheckRequest(BaseModel):
    student_id: Optional[str] = None
    module_id: str
    course_id: Optional[str] = None


class CompletionCheckResponse(BaseModel):
    success: bool = True
    module_completion: int
    course_completion: int
    notifications_created: List[str] = []


# Bulk actions

class BulkSelection(BaseModel):
    student_ids: List[str]
    course_id: Optional[str] = None


class AnnouncementRequest(BulkSelection):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class DeadlineExtensionRequest(BulkSelection):
    assessment_id: str
    days: int = Field(7, ge=1)


class GradeAdjustmentRequest(BulkSelection):
    assessment_id: str
    adjustment_type: Literal["add", "multiply"] = "add"
    value: float = 0


class BatchItemResponse(BaseModel):
    item_id: str
    success: bool
    error: Optional[str] = None


class BatchResultResponse(BaseModel):
    total: int
    succeeded: int
    failed: int
    summary: str
    items: List[BatchItemResponse]


# Calendar

class AgendaItemResponse(BaseModel):
    kind: Literal["deadline", "event"]
    item_id: str
    course_id: Optional[str] = None
    title: str
    starts_at: datetime
    assessment_type: Optional[AssessmentType] = None
