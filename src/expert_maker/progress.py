"""Overall progress figures and dashboard labels."""
from expert_maker.models import ExpertPlan, RankConfig, RankState
from expert_maker.rank import BELTS
from expert_maker.utils import round_half_up


def get_progress_label(progress: float) -> str:
    if progress >= 100:
        return "MASTERY"
    elif progress >= 60:
        return "ADVANCED"
    elif progress >= 25:
        return "BUILDING"
    return "STARTING"


def get_progress_color(progress: float) -> str:
    if progress >= 100:
        return "magenta"
    elif progress >= 60:
        return "green"
    elif progress >= 25:
        return "yellow"
    return "cyan"


def compute_progress(state: RankState, config: RankConfig) -> int:
    """Share of the full belt ladder earned so far, 0-100."""
    per_belt = config.stripes_per_belt * config.points_per_stripe
    total_needed = per_belt * (len(BELTS) - 1)
    current = state.belt_index * per_belt + state.stripes * config.points_per_stripe + state.points
    return min(100, round_half_up(current / total_needed * 100))


def plan_completion(plan: ExpertPlan) -> int:
    session_ids = {s.id for s in plan.iter_sessions()}
    if not session_ids:
        return 0
    done = len(session_ids.intersection(plan.completed_session_ids))
    return round_half_up(done / len(session_ids) * 100)
