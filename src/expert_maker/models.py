"""Data classes for the study planner domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Pace(str, Enum):
    BALANCED = "balanced"
    INTENSIVE = "intensive"
    FOUNDATIONS = "foundations"


class QuizMode(str, Enum):
    DIAGNOSTIC = "diagnostic"
    ASSESSMENT = "assessment"


@dataclass(frozen=True)
class Resource:
    title: str
    url: str


@dataclass(frozen=True)
class GuideSection:
    title: str
    detail: str = ""
    bullets: tuple = ()


@dataclass(frozen=True)
class PracticeDrill:
    title: str
    steps: tuple = ()


@dataclass(frozen=True)
class StudyGuide:
    overview: str = ""
    objectives: tuple = ()
    sections: tuple = ()  # GuideSection
    practice: tuple = ()  # PracticeDrill
    reflection: tuple = ()
    project_prompt: str = ""


@dataclass(frozen=True)
class FocusArea:
    id: str
    title: str
    summary: str = ""
    study_guide: StudyGuide = field(default_factory=StudyGuide)
    resources: tuple = ()  # Resource


@dataclass(frozen=True)
class QuizTemplate:
    id: str
    focus_id: str
    question: str
    options: tuple
    answer_index: int
    rationale: str = ""
    doc_link: str = ""


@dataclass(frozen=True)
class Topic:
    id: str
    title: str
    description: str = ""
    focus_areas: tuple = ()  # FocusArea
    quiz_bank: tuple = ()  # QuizTemplate


@dataclass(frozen=True)
class QuizQuestion:
    """A quiz template as handed to the quiz-taking flow; keeps the answer for grading."""

    id: str
    question: str
    options: tuple
    answer_index: int
    rationale: str = ""
    doc_link: str = ""


@dataclass(frozen=True)
class SessionPlan:
    id: str
    topic_id: str
    topic_title: str
    focus: FocusArea
    duration_minutes: int
    summary: str = ""
    quiz: tuple = ()  # QuizQuestion


@dataclass(frozen=True)
class WeekPlan:
    id: str
    week_number: int
    theme: str
    summary: str
    sessions: tuple = ()  # SessionPlan


@dataclass(frozen=True)
class ExpertPlan:
    id: str
    title: str
    created_at: str
    topics: tuple
    weeks: int
    hours_per_week: int
    weeks_data: tuple = ()  # WeekPlan
    completed_session_ids: tuple = ()
    pace: Pace = Pace.BALANCED
    personal_note: str = ""
    auto_complete_on_pass: bool = True

    def iter_sessions(self):
        for week in self.weeks_data:
            yield from week.sessions


@dataclass(frozen=True)
class RankState:
    belt_index: int = 0
    stripes: int = 0
    points: int = 0


@dataclass(frozen=True)
class RankConfig:
    points_per_stripe: int = 3
    stripes_per_belt: int = 4
    pass_points: int = 2
    fail_points: int = 1
    pass_score: int = 90

    def __post_init__(self):
        if self.points_per_stripe <= 0:
            raise ValueError("points_per_stripe must be positive")
        if self.stripes_per_belt <= 0:
            raise ValueError("stripes_per_belt must be positive")
        if not 0 <= self.pass_score <= 100:
            raise ValueError("pass_score must be between 0 and 100")
        if self.pass_points < 0 or self.fail_points < 0:
            raise ValueError("awarded points cannot be negative")


@dataclass(frozen=True)
class Weakness:
    question: str
    rationale: str = ""
    doc_link: str = ""

    def to_dict(self) -> dict:
        return {"question": self.question, "rationale": self.rationale, "docLink": self.doc_link}

    @classmethod
    def from_dict(cls, data: dict) -> "Weakness":
        return cls(
            question=data["question"],
            rationale=data.get("rationale", ""),
            doc_link=data.get("docLink", ""),
        )


@dataclass(frozen=True)
class QuizResult:
    score: int
    correct: int
    total: int
    weaknesses: tuple = ()  # Weakness


@dataclass(frozen=True)
class TestRecord:
    __test__ = False  # not a pytest class

    id: str
    task_id: str
    score: int
    passed: bool
    timestamp: str
    mode: QuizMode
    session_id: str
    weaknesses: tuple = ()  # Weakness


@dataclass(frozen=True)
class RankUpdate:
    state: RankState
    awarded_points: int
    leveled_up: bool


@dataclass(frozen=True)
class TimelineStep:
    id: str
    title: str
    minutes: int
    focus: str
    description: str
    actions: tuple = ()


@dataclass
class QuizOutcome:
    record: TestRecord
    result: QuizResult
    plan: ExpertPlan
    message: str
    rank_update: Optional[RankUpdate] = None
