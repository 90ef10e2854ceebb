"""Break a session into a timed lesson agenda."""
from expert_maker.models import Pace, SessionPlan, TimelineStep
from expert_maker.utils import round_half_up

PACE_NARRATIVE = {
    Pace.BALANCED: "Blend conceptual study with hands-on drills to keep momentum steady without burnout.",
    Pace.INTENSIVE: "Accelerate mastery by committing to extended deep-work blocks and rapid feedback cycles.",
    Pace.FOUNDATIONS: "Slow the cadence slightly so fundamentals are rock-solid before layering advanced tactics.",
}


def build_lesson_timeline(session: SessionPlan) -> list[TimelineStep]:
    """Prime, one module per guide section, practice lab, then retrospective."""
    total = session.duration_minutes
    guide = session.focus.study_guide
    sections = guide.sections
    prep = max(15, round_half_up(total * 0.2))
    concept = max(20, round_half_up(total * 0.35))
    practice = max(25, round_half_up(total * 0.3))
    reflection = max(10, total - (prep + concept + practice))
    per_section = max(15, round_half_up(concept / len(sections))) if sections else concept

    resources = session.focus.resources
    timeline = [
        TimelineStep(
            id="prime",
            title="Prime the Context",
            minutes=prep,
            focus="Orient",
            description=(
                "Anchor yourself in the scenario, success criteria, and unknowns before diving into implementation."
            ),
            actions=(
                "Translate the lesson overview into a problem statement and explicit success metrics.",
                f"Preview the {len(sections)} deep-dive modules and highlight prerequisites to refresh."
                if sections
                else "List prerequisite knowledge to refresh so the session stays focused on new insight.",
                f"Skim reference material ({', '.join(r.title for r in resources)}) "
                "to map where you'll verify assumptions."
                if resources
                else "Identify authoritative docs, RFCs, or runbooks you will consult during execution.",
            ),
        )
    ]

    for index, section in enumerate(sections, 1):
        timeline.append(TimelineStep(
            id=f"module-{index}",
            title=f"Module {index}: {section.title}",
            minutes=per_section,
            focus="Concept Deep Dive",
            description=section.detail,
            actions=section.bullets or (
                f"Document the moving parts involved in {section.title.lower()} and how they coordinate.",
                "Draft a concise runbook entry capturing triggers, guardrails, and escalation paths.",
            ),
        ))

    if guide.practice:
        practice_actions = tuple(f"{d.title}: {' → '.join(d.steps)}" for d in guide.practice)
    else:
        practice_actions = (
            "Design a realistic experiment that proves the concept end-to-end.",
            "Capture logs, metrics, or screenshots that demonstrate success criteria being met.",
        )
    timeline.append(TimelineStep(
        id="practice",
        title="Deliberate Practice Lab",
        minutes=practice,
        focus="Apply",
        description=(
            "Convert conceptual clarity into reliable execution by shipping tangible artifacts "
            "and stress-testing assumptions."
        ),
        actions=practice_actions,
    ))

    prompts = guide.reflection or (
        "Record the heuristics or mental models you solidified during the session.",
        "List the leading indicators that will tell you the capability is production ready.",
    )
    timeline.append(TimelineStep(
        id="reflection",
        title="Retrospective & Knowledge Integration",
        minutes=reflection,
        focus="Solidify",
        description="Synthesize insights, identify remaining risks, and plot the next iteration to keep momentum.",
        actions=tuple(prompts) + (
            f"Outline how you'll tackle the capstone challenge: {guide.project_prompt}",
            f"Schedule the {len(session.quiz)}-question assessment to validate mastery within 24 hours.",
        ),
    ))
    return timeline
