"""Study session management: wires quizzes, rank and plan changes to the store."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Optional

from expert_maker.db import (
    append_test, clear_tests, get_connection, load_latest_plan, load_rank_config, load_rank_state,
    save_plan, save_rank_config, save_rank_state,
)
from expert_maker.models import ExpertPlan, Pace, QuizMode, QuizOutcome, RankConfig, RankState
from expert_maker.plan import PlanRequest, generate_plan, validate_request
from expert_maker.quiz import build_test_record, grade_quiz, is_complete_submission
from expert_maker.rank import apply_test_result, initial_rank_state

log = logging.getLogger(__name__)


class IncompleteSubmissionError(ValueError):
    pass


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_current_plan(db_path: str) -> ExpertPlan | None:
    return load_latest_plan(db_path)


def get_rank(db_path: str) -> tuple[RankState, RankConfig]:
    return load_rank_state(db_path), load_rank_config(db_path)


def reset_progress(db_path: str) -> None:
    """Drop test history and start the rank ladder over; the rank config is kept."""
    clear_tests(db_path)
    save_rank_state(db_path, initial_rank_state())


def create_plan(
    db_path: str,
    request: PlanRequest,
    now: Optional[datetime] = None,
    strict: bool = False,
) -> ExpertPlan:
    validate_request(request, strict=strict)
    plan = generate_plan(request, now=now)
    save_plan(db_path, plan)
    reset_progress(db_path)
    log.info("Created plan %s with %d weeks", plan.id, plan.weeks)
    return plan


def find_session(plan: ExpertPlan, session_id: str):
    for week in plan.weeks_data:
        for session in week.sessions:
            if session.id == session_id:
                return week, session
    return None


def _require_session(plan: ExpertPlan, session_id: str):
    found = find_session(plan, session_id)
    if found is None:
        raise KeyError(f"No session {session_id} in plan {plan.id}")
    return found


def toggle_session_complete(db_path: str, plan: ExpertPlan, session_id: str) -> ExpertPlan:
    _require_session(plan, session_id)
    completed = list(plan.completed_session_ids)
    if session_id in completed:
        completed.remove(session_id)
    else:
        completed.append(session_id)
    updated = replace(plan, completed_session_ids=tuple(completed))
    save_plan(db_path, updated)
    return updated


def update_plan_settings(
    db_path: str,
    plan: ExpertPlan,
    pace=None,
    personal_note: Optional[str] = None,
    auto_complete_on_pass: Optional[bool] = None,
) -> ExpertPlan:
    changes = {}
    if pace is not None:
        changes["pace"] = Pace(pace)
    if personal_note is not None:
        changes["personal_note"] = personal_note
    if auto_complete_on_pass is not None:
        changes["auto_complete_on_pass"] = bool(auto_complete_on_pass)
    if not changes:
        return plan
    updated = replace(plan, **changes)
    save_plan(db_path, updated)
    return updated


def update_rank_config(db_path: str, config: RankConfig) -> RankConfig:
    """Persist a new rank config; the current rank state is not recomputed."""
    save_rank_config(db_path, config)
    return config


def submit_quiz(
    db_path: str,
    plan: ExpertPlan,
    session_id: str,
    mode,
    responses: Mapping[str, int],
    now: Optional[datetime] = None,
) -> QuizOutcome:
    """Grade a finished quiz, record it, and for assessments advance the rank.

    A passed assessment marks the session complete when the plan auto-completes on pass.
    """
    mode = QuizMode(mode)
    _, session = _require_session(plan, session_id)
    if not is_complete_submission(session.quiz, responses):
        raise IncompleteSubmissionError("Answer every question before submitting.")

    state, config = get_rank(db_path)
    result = grade_quiz(session.quiz, responses)
    record = build_test_record(session.id, mode, result, config.pass_score, now=now)
    append_test(db_path, record)

    if mode == QuizMode.DIAGNOSTIC:
        return QuizOutcome(
            record=record,
            result=result,
            plan=plan,
            message="Diagnostic captured. Tailor your study using the guidance below.",
        )

    update = apply_test_result(state, config, result.score)
    save_rank_state(db_path, update.state)
    if record.passed and plan.auto_complete_on_pass and session.id not in plan.completed_session_ids:
        plan = replace(plan, completed_session_ids=plan.completed_session_ids + (session.id,))
        save_plan(db_path, plan)
    if record.passed:
        message = f"Great job! Earned {update.awarded_points} points toward your next stripe."
    else:
        message = f"Keep going! {update.awarded_points} review point added. Check the study plan for gaps."
    return QuizOutcome(record=record, result=result, plan=plan, message=message, rank_update=update)
