import pytest
from unittest.mock import patch

from expert_maker.app import (
    COMMANDS, SessionExitRequested, cmd_import, pick_session, run_quiz_session, session_int_prompt,
    session_prompt,
)
from expert_maker.db import init_db, load_latest_plan
from expert_maker.models import QuizQuestion
from expert_maker.plan import PlanRequest
from expert_maker.study import create_plan


def _questions():
    return [
        QuizQuestion(id="q1", question="One?", options=("a", "b", "c"), answer_index=1),
        QuizQuestion(id="q2", question="Two?", options=("a", "b"), answer_index=0),
    ]


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("expert_maker.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("expert_maker.app.Prompt.ask", return_value="MENU "):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("expert_maker.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_int_prompt_raises_on_q():
    with patch("expert_maker.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("answer", choices=["1", "2", "3", "4"])


def test_session_int_prompt_returns_normal_input():
    with patch("expert_maker.app.Prompt.ask", return_value="3") as ask:
        result = session_int_prompt("answer", choices=["1", "2", "3", "4"])
        assert result == 3
        assert ask.call_args.kwargs["choices"] == ["1", "2", "3", "4", "q", "menu"]


def test_run_quiz_session_maps_answers_to_indexes():
    with patch("expert_maker.app.Prompt.ask", side_effect=["2", "1"]):
        responses = run_quiz_session(_questions())
    assert responses == {"q1": 1, "q2": 0}


def test_run_quiz_session_exits_on_q():
    with patch("expert_maker.app.Prompt.ask", side_effect=["2", "q"]):
        with pytest.raises(SessionExitRequested):
            run_quiz_session(_questions())


def test_run_quiz_session_without_questions():
    with patch("expert_maker.app.Prompt.ask") as ask:
        assert run_quiz_session([]) == {}
    ask.assert_not_called()


def test_pick_session(tmp_db, fixed_now):
    init_db(tmp_db)
    plan = create_plan(tmp_db, PlanRequest(("oauth", "rag"), 2, 6), now=fixed_now)
    with patch("expert_maker.app.Prompt.ask", return_value="3"):
        session = pick_session(plan)
    assert session == plan.weeks_data[1].sessions[0]


def test_cmd_import_reports_malformed_file(tmp_db, tmp_path):
    init_db(tmp_db)
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    with patch("expert_maker.app.Prompt.ask", return_value=str(bad)), \
            patch("expert_maker.app.console.print") as printed:
        cmd_import(tmp_db)
    messages = [call.args[0] for call in printed.call_args_list]
    assert "[red]Unable to import plan. The file may be malformed.[/red]" in messages
    assert load_latest_plan(tmp_db) is None


def test_every_menu_command_is_registered():
    assert set(COMMANDS) == {
        "new", "plan", "lesson", "diagnostic", "assessment", "complete", "rank", "settings",
        "export", "import", "ask",
    }
