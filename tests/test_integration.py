# tests/test_integration.py
"""End-to-end test of the core workflow."""
from unittest.mock import patch

from expert_maker.app import cmd_complete, cmd_new, cmd_quiz
from expert_maker.db import init_db, list_tests, load_latest_plan
from expert_maker.importer import export_plan, import_plan
from expert_maker.models import Pace, QuizMode, RankState
from expert_maker.plan import PlanRequest
from expert_maker.progress import compute_progress, plan_completion
from expert_maker.review import recent_weaknesses
from expert_maker.study import create_plan, get_rank, submit_quiz


def _correct(session):
    return {q.id: q.answer_index for q in session.quiz}


def test_full_study_workflow(tmp_db, tmp_path, fixed_now):
    """Generate a plan, study through it, and verify every system agrees."""
    init_db(tmp_db)
    plan = create_plan(tmp_db, PlanRequest(("oauth", "rag", "node"), 4, 9, Pace.BALANCED), now=fixed_now)
    assert len(list(plan.iter_sessions())) == 12
    assert all(s.duration_minutes == 90 for s in plan.iter_sessions())

    # Diagnostic then a failed assessment on the first session
    first = plan.weeks_data[0].sessions[0]
    submit_quiz(tmp_db, plan, first.id, QuizMode.DIAGNOSTIC, _correct(first), now=fixed_now)
    wrong = {q.id: (q.answer_index + 1) % len(q.options) for q in first.quiz}
    outcome = submit_quiz(tmp_db, plan, first.id, QuizMode.ASSESSMENT, wrong, now=fixed_now)
    assert outcome.result.score == 0
    assert len(recent_weaknesses(list_tests(tmp_db))) == len(first.quiz)

    # Pass every session in week one
    for session in plan.weeks_data[0].sessions:
        plan = submit_quiz(tmp_db, plan, session.id, QuizMode.ASSESSMENT, _correct(session), now=fixed_now).plan

    state, config = get_rank(tmp_db)
    assert state == RankState(0, 2, 1)
    assert compute_progress(state, config) == 12
    assert plan_completion(plan) == 25

    # Export and re-import keeps everything
    path = export_plan(plan, tmp_path)
    result = import_plan(tmp_db, path)
    assert result.plan == plan
    assert load_latest_plan(tmp_db) == plan
    assert len(list_tests(tmp_db)) == 5


def test_cli_new_quiz_and_complete(tmp_db, fixed_now):
    """Drive the command handlers with scripted prompts."""
    init_db(tmp_db)
    with patch("expert_maker.app.Prompt.ask", side_effect=["oauth, system", "foundations"]), \
            patch("expert_maker.app.IntPrompt.ask", side_effect=[2, 4]):
        cmd_new(tmp_db)
    plan = load_latest_plan(tmp_db)
    assert plan.topics == ("oauth", "system")
    assert plan.pace == Pace.FOUNDATIONS
    assert plan.weeks == 2

    session = plan.weeks_data[0].sessions[1]
    answers = [str(q.answer_index + 1) for q in session.quiz]
    with patch("expert_maker.app.Prompt.ask", side_effect=["2", *answers]):
        cmd_quiz(tmp_db, QuizMode.ASSESSMENT)
    plan = load_latest_plan(tmp_db)
    assert plan.completed_session_ids == (session.id,)
    assert get_rank(tmp_db)[0] == RankState(0, 0, 2)

    with patch("expert_maker.app.Prompt.ask", return_value="2"):
        cmd_complete(tmp_db)
    assert load_latest_plan(tmp_db).completed_session_ids == ()
