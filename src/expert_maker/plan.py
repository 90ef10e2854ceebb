"""Multi-week plan generation and plan document encoding."""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from expert_maker.catalog import get_catalog
from expert_maker.models import (
    ExpertPlan, FocusArea, GuideSection, Pace, PracticeDrill, QuizQuestion, Resource,
    SessionPlan, StudyGuide, WeekPlan,
)
from expert_maker.utils import iso_timestamp, round_half_up, safe_id

log = logging.getLogger(__name__)

PRODUCT_NAME = "ExpertMaker"
MAX_QUIZ_QUESTIONS = 4
MIN_SESSION_MINUTES = 60
MAX_SESSION_MINUTES = 90
MIN_WEEKS, MAX_WEEKS = 1, 12
MIN_HOURS, MAX_HOURS = 2, 20
THEME_SEPARATOR = " • "

PACE_DESCRIPTIONS = {
    Pace.BALANCED: "Balance new concepts with consistent repetition and reflection.",
    Pace.INTENSIVE: "Accelerate outcomes with extended sessions and deep dives into production scenarios.",
    Pace.FOUNDATIONS: "Focus on core fundamentals and deliberate practice drills to cement understanding.",
}


class PlanRequestError(ValueError):
    pass


@dataclass(frozen=True)
class PlanRequest:
    selected_topics: tuple
    weeks: int
    hours_per_week: int
    pace: Pace = Pace.BALANCED


def validate_request(request: PlanRequest, catalog=None, strict: bool = False) -> None:
    """Reject requests the generator should never see.

    The generator itself silently drops unknown topic ids; pass strict=True to
    reject them here instead.
    """
    if not request.selected_topics:
        raise PlanRequestError("Select at least one topic to generate a plan.")
    if not MIN_WEEKS <= request.weeks <= MAX_WEEKS:
        raise PlanRequestError(f"Weeks must be between {MIN_WEEKS} and {MAX_WEEKS}.")
    if not MIN_HOURS <= request.hours_per_week <= MAX_HOURS:
        raise PlanRequestError(f"Hours per week must be between {MIN_HOURS} and {MAX_HOURS}.")
    try:
        Pace(request.pace)
    except ValueError:
        raise PlanRequestError(f"Unknown pace: {request.pace}") from None
    if strict:
        catalog = get_catalog() if catalog is None else catalog
        unknown = [t for t in request.selected_topics if t not in catalog]
        if unknown:
            raise PlanRequestError(f"Unknown topics: {', '.join(unknown)}")


def choose_focus(topic, offset: int) -> FocusArea:
    return topic.focus_areas[offset % len(topic.focus_areas)]


def to_quiz_question(template) -> QuizQuestion:
    return QuizQuestion(
        id=template.id,
        question=template.question,
        options=template.options,
        answer_index=template.answer_index,
        rationale=template.rationale,
        doc_link=template.doc_link,
    )


def build_quiz(topic, focus_id: str) -> tuple:
    """Questions for the focus area first, then the rest of the topic's bank, capped at four."""
    matching = [q for q in topic.quiz_bank if q.focus_id == focus_id]
    fallback = [q for q in topic.quiz_bank if q.focus_id != focus_id]
    return tuple(to_quiz_question(q) for q in (matching + fallback)[:MAX_QUIZ_QUESTIONS])


def clamp_session_minutes(hours_per_week: int, topic_count: int) -> int:
    per_session = round_half_up(hours_per_week * 60 / max(topic_count, 1))
    return min(MAX_SESSION_MINUTES, max(MIN_SESSION_MINUTES, per_session))


def generate_plan(request: PlanRequest, catalog=None, now: Optional[datetime] = None) -> ExpertPlan:
    catalog = get_catalog() if catalog is None else catalog
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    pace = Pace(request.pace)

    topics = [catalog.get(t) for t in request.selected_topics]
    dropped = [t for t, topic in zip(request.selected_topics, topics) if topic is None]
    if dropped:
        log.debug("Dropping unknown topics from plan request: %s", dropped)
    topics = [t for t in topics if t is not None]
    duration = clamp_session_minutes(request.hours_per_week, len(topics))

    weeks_data = []
    for week_index in range(request.weeks):
        week_number = week_index + 1
        sessions = []
        for topic_index, topic in enumerate(topics):
            focus = choose_focus(topic, week_index + topic_index)
            sessions.append(SessionPlan(
                id=safe_id(f"session-{topic.id}-{week_number}"),
                topic_id=topic.id,
                topic_title=topic.title,
                focus=focus,
                duration_minutes=duration,
                summary=(
                    f"{focus.summary} Emphasize deliberate drills for {topic.title.lower()} "
                    "fundamentals and ship a tangible artifact by the end of the session."
                ),
                quiz=build_quiz(topic, focus.id),
            ))
        theme = THEME_SEPARATOR.join(f"{s.topic_title}: {s.focus.title}" for s in sessions)
        weeks_data.append(WeekPlan(
            id=safe_id(f"week-{week_number}"),
            week_number=week_number,
            theme=f"Week {week_number}: {theme}",
            summary=(
                f"{PACE_DESCRIPTIONS[pace]} Plan {len(sessions)} focus blocks across "
                f"{len(topics)} topics and capture takeaways after every diagnostic."
            ),
            sessions=tuple(sessions),
        ))

    return ExpertPlan(
        id=safe_id("plan"),
        title=f"{PRODUCT_NAME} Plan — {now:%b} {now.day}, {now.year}",
        created_at=iso_timestamp(now),
        topics=tuple(request.selected_topics),
        weeks=request.weeks,
        hours_per_week=request.hours_per_week,
        weeks_data=tuple(weeks_data),
        completed_session_ids=(),
        pace=pace,
        personal_note="",
        auto_complete_on_pass=True,
    )


# --- Plan documents ---


def _focus_to_dict(focus: FocusArea) -> dict:
    guide = focus.study_guide
    return {
        "id": focus.id,
        "title": focus.title,
        "summary": focus.summary,
        "studyGuide": {
            "overview": guide.overview,
            "objectives": list(guide.objectives),
            "sections": [
                {"title": s.title, "detail": s.detail, "bullets": list(s.bullets)} for s in guide.sections
            ],
            "practice": [{"title": p.title, "steps": list(p.steps)} for p in guide.practice],
            "reflection": list(guide.reflection),
            "projectPrompt": guide.project_prompt,
        },
        "resources": [{"title": r.title, "url": r.url} for r in focus.resources],
    }


def plan_to_dict(plan: ExpertPlan) -> dict:
    return {
        "id": plan.id,
        "title": plan.title,
        "createdAt": plan.created_at,
        "topics": list(plan.topics),
        "weeks": plan.weeks,
        "hoursPerWeek": plan.hours_per_week,
        "weeksData": [
            {
                "id": week.id,
                "weekNumber": week.week_number,
                "theme": week.theme,
                "summary": week.summary,
                "sessions": [
                    {
                        "id": s.id,
                        "topicId": s.topic_id,
                        "topicTitle": s.topic_title,
                        "focus": _focus_to_dict(s.focus),
                        "durationMinutes": s.duration_minutes,
                        "summary": s.summary,
                        "quiz": [
                            {
                                "id": q.id,
                                "question": q.question,
                                "options": list(q.options),
                                "answerIndex": q.answer_index,
                                "rationale": q.rationale,
                                "docLink": q.doc_link,
                            }
                            for q in s.quiz
                        ],
                    }
                    for s in week.sessions
                ],
            }
            for week in plan.weeks_data
        ],
        "completedSessionIds": list(plan.completed_session_ids),
        "pace": Pace(plan.pace).value,
        "personalNote": plan.personal_note,
        "autoCompleteOnPass": plan.auto_complete_on_pass,
    }


def serialize_plan(plan: ExpertPlan) -> str:
    return json.dumps(plan_to_dict(plan), ensure_ascii=False)


MALFORMED = "malformed"
MISSING_FIELD = "missing_field"


@dataclass(frozen=True)
class DecodeError:
    kind: str
    message: str
    field: Optional[str] = None


@dataclass(frozen=True)
class PlanDecodeResult:
    plan: Optional[ExpertPlan] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.plan is not None


class _FieldError(Exception):
    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


def _req(data: dict, key: str, path: str, kind):
    value = data.get(key)
    if isinstance(value, bool) and kind is not bool:
        raise _FieldError(f"{path}.{key}")
    if not isinstance(value, kind):
        raise _FieldError(f"{path}.{key}")
    return value


def _focus_from_dict(data: dict, path: str) -> FocusArea:
    guide = data.get("studyGuide")
    if not isinstance(guide, dict):
        guide = {}
    return FocusArea(
        id=_req(data, "id", path, str),
        title=_req(data, "title", path, str),
        summary=data.get("summary", ""),
        study_guide=StudyGuide(
            overview=guide.get("overview", ""),
            objectives=tuple(guide.get("objectives", [])),
            sections=tuple(
                GuideSection(title=s["title"], detail=s.get("detail", ""), bullets=tuple(s.get("bullets", [])))
                for s in guide.get("sections", [])
            ),
            practice=tuple(
                PracticeDrill(title=p["title"], steps=tuple(p.get("steps", [])))
                for p in guide.get("practice", [])
            ),
            reflection=tuple(guide.get("reflection", [])),
            project_prompt=guide.get("projectPrompt", ""),
        ),
        resources=tuple(
            Resource(title=r["title"], url=r["url"]) for r in data.get("resources", [])
        ),
    )


def _session_from_dict(data: dict, path: str) -> SessionPlan:
    quiz = []
    for i, q in enumerate(_req(data, "quiz", path, list)):
        q_path = f"{path}.quiz[{i}]"
        if not isinstance(q, dict):
            raise _FieldError(q_path)
        quiz.append(QuizQuestion(
            id=_req(q, "id", q_path, str),
            question=_req(q, "question", q_path, str),
            options=tuple(_req(q, "options", q_path, list)),
            answer_index=_req(q, "answerIndex", q_path, int),
            rationale=q.get("rationale", ""),
            doc_link=q.get("docLink", ""),
        ))
    return SessionPlan(
        id=_req(data, "id", path, str),
        topic_id=_req(data, "topicId", path, str),
        topic_title=_req(data, "topicTitle", path, str),
        focus=_focus_from_dict(_req(data, "focus", path, dict), f"{path}.focus"),
        duration_minutes=_req(data, "durationMinutes", path, int),
        summary=data.get("summary", ""),
        quiz=tuple(quiz),
    )


def _week_from_dict(data: dict, path: str) -> WeekPlan:
    sessions = []
    for i, s in enumerate(_req(data, "sessions", path, list)):
        s_path = f"{path}.sessions[{i}]"
        if not isinstance(s, dict):
            raise _FieldError(s_path)
        sessions.append(_session_from_dict(s, s_path))
    return WeekPlan(
        id=_req(data, "id", path, str),
        week_number=_req(data, "weekNumber", path, int),
        theme=_req(data, "theme", path, str),
        summary=_req(data, "summary", path, str),
        sessions=tuple(sessions),
    )


def plan_from_dict(data: dict) -> ExpertPlan:
    """Build a plan from its document form; raises _FieldError on a missing structural field."""
    weeks_data = []
    for i, w in enumerate(_req(data, "weeksData", "plan", list)):
        w_path = f"plan.weeksData[{i}]"
        if not isinstance(w, dict):
            raise _FieldError(w_path)
        weeks_data.append(_week_from_dict(w, w_path))

    completed = data.get("completedSessionIds")
    if not isinstance(completed, list):
        completed = []
    try:
        pace = Pace(data.get("pace") or Pace.BALANCED)
    except ValueError:
        log.warning("Unknown pace %r in plan document, using balanced", data.get("pace"))
        pace = Pace.BALANCED
    note = data.get("personalNote")
    auto_complete = data.get("autoCompleteOnPass")

    return ExpertPlan(
        id=_req(data, "id", "plan", str),
        title=_req(data, "title", "plan", str),
        created_at=_req(data, "createdAt", "plan", str),
        topics=tuple(_req(data, "topics", "plan", list)),
        weeks=_req(data, "weeks", "plan", int),
        hours_per_week=_req(data, "hoursPerWeek", "plan", int),
        weeks_data=tuple(weeks_data),
        completed_session_ids=tuple(completed),
        pace=pace,
        personal_note=note if isinstance(note, str) else "",
        auto_complete_on_pass=auto_complete if isinstance(auto_complete, bool) else True,
    )


def deserialize_plan(text: str) -> PlanDecodeResult:
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        return PlanDecodeResult(error=DecodeError(MALFORMED, f"Not a valid plan document: {e}"))
    if not isinstance(data, dict):
        return PlanDecodeResult(error=DecodeError(MALFORMED, "Plan document must be a JSON object"))
    try:
        plan = plan_from_dict(data)
    except _FieldError as e:
        return PlanDecodeResult(error=DecodeError(MISSING_FIELD, f"Missing or invalid field: {e.path}", e.path))
    except (KeyError, TypeError, AttributeError) as e:
        return PlanDecodeResult(error=DecodeError(MISSING_FIELD, f"Invalid plan structure: {e}"))
    return PlanDecodeResult(plan=plan)
