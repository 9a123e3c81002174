"""Pydantic models for type safety."""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Wire fallbacks for a generation request that leaves a field out.
# The settings page defaults live in config.Settings.
WIRE_DEFAULT_LOWER_BOUND = "single digit addition"
WIRE_DEFAULT_UPPER_BOUND = "division to 9"


class Outcome(str, Enum):
    """Classification of the learner's last response."""
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNKNOWN = "unknown"  # explicit "I don't know"

    @property
    def wire_value(self) -> Optional[str]:
        """Value sent as `previousAnswer` to the question service."""
        return _OUTCOME_TO_WIRE[self]

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "Outcome":
        if value is None:
            return cls.NONE
        return _WIRE_TO_OUTCOME[value]


_OUTCOME_TO_WIRE = {
    Outcome.NONE: None,
    Outcome.CORRECT: "correct",
    Outcome.INCORRECT: "incorrect",
    Outcome.UNKNOWN: "dontknow",
}
_WIRE_TO_OUTCOME = {v: k for k, v in _OUTCOME_TO_WIRE.items() if v is not None}


class SessionPhase(str, Enum):
    IDLE = "idle"
    AWAITING_FIRST_QUESTION = "awaiting_first_question"
    PRESENTING = "presenting"
    EVALUATING = "evaluating"


class QuestionRecord(BaseModel):
    """One generated question, as returned by the generation service."""
    question: str
    answer: str
    difficulty: str
    explanation: str
    steps: List[str] = []

    @field_validator("answer", mode="before")
    @classmethod
    def _answer_as_text(cls, value):
        # The LLM is asked for "just the number" and sometimes sends a JSON number.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("steps", mode="before")
    @classmethod
    def _steps_default(cls, value):
        return [] if value is None else value


class QuestionRequest(BaseModel):
    """Body of a question-generation request (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    previous_answer: Optional[Literal["correct", "incorrect", "dontknow"]] = Field(
        default=None, alias="previousAnswer"
    )
    correct_streak: int = Field(default=0, ge=0, alias="correctStreak")
    current_difficulty: str = Field(default=WIRE_DEFAULT_LOWER_BOUND, alias="currentDifficulty")
    lower_bound_difficulty: str = Field(
        default=WIRE_DEFAULT_LOWER_BOUND, alias="lowerBoundDifficulty"
    )
    upper_bound_difficulty: str = Field(
        default=WIRE_DEFAULT_UPPER_BOUND, alias="upperBoundDifficulty"
    )
    use_skills_list: bool = Field(default=False, alias="useSkillsList")
    skills_list: List[str] = Field(default=[], alias="skillsList")

    @property
    def outcome(self) -> Outcome:
        return Outcome.from_wire(self.previous_answer)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class BoundedDifficulty(BaseModel):
    """Free-text lower/upper labels; the LLM interprets the ordering."""
    kind: Literal["bounded"] = "bounded"
    lower: str
    upper: str
    current: str


class SkillListDifficulty(BaseModel):
    """Ordered skills (easiest first) with an index into them."""
    kind: Literal["skills"] = "skills"
    skills: List[str] = Field(min_length=1)
    current_index: int = 0

    @model_validator(mode="after")
    def _clamp_index(self) -> "SkillListDifficulty":
        self.current_index = max(0, min(self.current_index, len(self.skills) - 1))
        return self

    @property
    def current(self) -> str:
        return self.skills[self.current_index]


DifficultyDescriptor = Union[BoundedDifficulty, SkillListDifficulty]


class AnswerEvent(BaseModel):
    """Per-submission record kept for the in-session chart."""
    number: int
    outcome: Outcome
    seconds: int
    streak: int
    multiplier: float
    difficulty: str


class Session(BaseModel):
    """Live quiz state for one learner run."""
    phase: SessionPhase = SessionPhase.IDLE
    descriptor: Optional[DifficultyDescriptor] = None
    streak: int = Field(default=0, ge=0)
    multiplier: Optional[float] = None  # None until the first submission
    outcome: Outcome = Outcome.NONE
    current_question: Optional[QuestionRecord] = None
    pending_question: Optional[QuestionRecord] = None
    target_difficulty: Optional[str] = None
    target_index: Optional[int] = None  # skill lists only
    elapsed_seconds: int = 0
    response_seconds: Optional[int] = None
    submitted_answer: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    show_explanation: bool = False
    show_steps: bool = False
    last_request: Optional[QuestionRequest] = None
    history: List[AnswerEvent] = []
