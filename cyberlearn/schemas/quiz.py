from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import Optional, List, Set
from datetime import datetime

from cyberlearn.core.config import settings
from cyberlearn.core.constants import QuizPhaseEnum


class QuizAnswer(BaseModel):
    question_index: int = Field(..., ge=0)
    selected_answer: str
    correct_answer: str

    @computed_field
    @property
    def is_correct(self) -> bool:
        return self.selected_answer == self.correct_answer


class QuizAttemptCreate(BaseModel):
    user_id: str
    module_id: str
    lesson_index: int = Field(..., ge=0)
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=1)
    answers: List[QuizAnswer] = []

    @model_validator(mode="after")
    def score_within_total(self):
        if self.score > self.total_questions:
            raise ValueError("Score cannot exceed the number of questions.")
        return self


class QuizAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: str
    lesson_index: int
    score: int
    total_questions: int
    answers: List[QuizAnswer] = []
    completed_at: Optional[datetime] = None

    @field_validator("answers", mode="before")
    @classmethod
    def default_answers(cls, v):
        return v or []

    @computed_field
    @property
    def percentage(self) -> int:
        return round(self.score / self.total_questions * 100) if self.total_questions else 0

    @computed_field
    @property
    def passed(self) -> bool:
        return self.total_questions > 0 and self.score / self.total_questions >= settings.QUIZ_PASS_THRESHOLD


class QuizOption(BaseModel):
    label: str
    text: str


class QuizQuestion(BaseModel):
    question: str
    options: List[QuizOption]
    correct_answer: str
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def correct_answer_is_an_option(self):
        labels = [option.label for option in self.options]
        if len(set(labels)) != len(labels):
            raise ValueError("Option labels must be unique.")
        if self.correct_answer not in labels:
            raise ValueError("correct_answer must match one of the option labels.")
        return self


class QuizSessionCreate(BaseModel):
    module_id: str
    lesson_index: int = Field(..., ge=0)
    questions: List[QuizQuestion] = []


class AnswerSelection(BaseModel):
    label: str


class QuizSessionState(BaseModel):
    """Everything needed to resume a quiz between requests."""
    owner_id: Optional[str] = None
    module_id: str
    lesson_index: int
    questions: List[QuizQuestion] = []
    current_index: int = 0
    answered: Set[int] = set()
    answers: List[QuizAnswer] = []
    submitted: bool = False
    score: int = 0
    previous_attempts: List[QuizAttempt] = []


class QuizResults(BaseModel):
    score: int
    total_questions: int
    percentage: int
    passed: bool
    history: List[int] = []


class QuizQuestionView(BaseModel):
    """A question as shown to the learner. The key and explanation appear once it is answered."""
    question: str
    options: List[QuizOption]
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None


class QuizView(BaseModel):
    phase: QuizPhaseEnum
    total_questions: int
    current_index: int = 0
    question: Optional[QuizQuestionView] = None
    selected_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    show_explanation: bool = False
    answered_count: int = 0
    progress_percent: int = 0
    can_previous: bool = False
    can_next: bool = False
    can_submit: bool = False
    results: Optional[QuizResults] = None

    model_config = ConfigDict(use_enum_values=True)


class QuizSessionRead(BaseModel):
    session_id: str
    module_id: str
    lesson_index: int
    view: QuizView
