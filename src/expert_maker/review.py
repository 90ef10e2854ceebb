"""Weak area identification from the test history."""
from expert_maker.models import QuizMode


def recent_weaknesses(tests: list, limit: int = 6) -> list[str]:
    """Question texts missed in the last `limit` assessments, oldest first."""
    assessments = [t for t in tests if t.mode == QuizMode.ASSESSMENT]
    recent = assessments[-limit:] if limit > 0 else []
    return [w.question for t in recent for w in t.weaknesses]


def session_weaknesses(tests: list) -> dict:
    """Weaknesses from each session's latest assessment that had any."""
    result = {}
    for t in tests:
        if t.mode == QuizMode.ASSESSMENT and t.weaknesses:
            result[t.session_id] = list(t.weaknesses)
    return result


def latest_results(tests: list, mode) -> dict:
    mode = QuizMode(mode)
    result = {}
    for t in tests:
        if t.mode == mode:
            result[t.session_id] = t
    return result
