"""Quiz grading and test records."""
from datetime import datetime, timezone
from typing import Mapping, Optional

from expert_maker.models import QuizMode, QuizResult, TestRecord, Weakness
from expert_maker.utils import iso_timestamp, round_half_up, safe_id

TASK_KEY_SEPARATOR = "::"


def grade_quiz(questions, responses: Mapping[str, int]) -> QuizResult:
    """Score answered questions; unanswered ones count as missed.

    An empty quiz scores 0 with no weaknesses.
    """
    total = len(questions)
    correct = 0
    weaknesses = []
    for q in questions:
        if responses.get(q.id) == q.answer_index:
            correct += 1
        else:
            weaknesses.append(Weakness(question=q.question, rationale=q.rationale, doc_link=q.doc_link))
    score = round_half_up(correct / max(total, 1) * 100)
    return QuizResult(score=score, correct=correct, total=total, weaknesses=tuple(weaknesses))


def is_complete_submission(questions, responses: Mapping[str, int]) -> bool:
    return all(q.id in responses for q in questions)


def task_key(session_id: str, mode) -> str:
    return f"{session_id}{TASK_KEY_SEPARATOR}{QuizMode(mode).value}"


def parse_task_key(task_id: str) -> tuple[str, QuizMode]:
    session_id, sep, mode = task_id.rpartition(TASK_KEY_SEPARATOR)
    if not sep:
        return task_id, QuizMode.DIAGNOSTIC
    try:
        return session_id, QuizMode(mode)
    except ValueError:
        return session_id, QuizMode.DIAGNOSTIC


def build_test_record(
    session_id: str,
    mode,
    result: QuizResult,
    pass_score: int,
    now: Optional[datetime] = None,
) -> TestRecord:
    now = now or datetime.now(timezone.utc)
    mode = QuizMode(mode)
    return TestRecord(
        id=safe_id("test"),
        task_id=task_key(session_id, mode),
        score=result.score,
        passed=result.score >= pass_score,
        timestamp=iso_timestamp(now),
        mode=mode,
        session_id=session_id,
        weaknesses=result.weaknesses,
    )
