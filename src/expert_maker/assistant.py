"""Offline study hints built from the plan and recent weaknesses."""
from expert_maker.models import ExpertPlan


def summarize_plan(plan: ExpertPlan) -> str:
    focus = "; ".join(
        ", ".join(f"{s.topic_title} — {s.focus.title}" for s in week.sessions)
        for week in plan.weeks_data
    )
    return f"Weeks: {plan.weeks}, Pace: {plan.pace.value}, Topics: {len(plan.topics)}. Focus: {focus}"


def ask_assistant(question: str, plan_summary: str = "", recent_weaknesses: list = ()) -> str:
    normalized = question.lower()
    hints = []
    if "resource" in normalized:
        hints.append("Review the session resources and official documentation linked in your plan.")
    if recent_weaknesses:
        hints.append(f"Focus on these improvement areas: {', '.join(recent_weaknesses)}.")
    if "quiz" in normalized or "test" in normalized:
        hints.append(
            "Revisit diagnostic questions and articulate the rationale for each answer to reinforce understanding."
        )
    summary = f"Plan focus: {plan_summary}." if plan_summary else "Keep progressing through your scheduled sessions."
    closing = "Break concepts into smaller drills and commit them to memory with spaced reviews."
    return "\n\n".join([summary, *hints, closing])
