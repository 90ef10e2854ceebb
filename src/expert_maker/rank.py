"""Belt and stripe ranking driven by assessment scores."""
import logging

from expert_maker.models import RankConfig, RankState, RankUpdate

log = logging.getLogger(__name__)

BELTS = ["White", "Blue", "Purple", "Brown", "Black", "Coral"]
FINAL_BELT = len(BELTS) - 1

DEFAULT_RANK_CONFIG = RankConfig(
    points_per_stripe=3,
    stripes_per_belt=4,
    pass_points=2,
    fail_points=1,
    pass_score=90,
)


def initial_rank_state() -> RankState:
    return RankState(belt_index=0, stripes=0, points=0)


def apply_test_result(state: RankState, config: RankConfig, score: int) -> RankUpdate:
    """Award points for a score and carry them into stripes and belts; state is not modified."""
    awarded = config.pass_points if score >= config.pass_score else config.fail_points
    belt, stripes, points = state.belt_index, state.stripes, state.points + awarded

    leveled_up = False
    while points >= config.points_per_stripe:
        points -= config.points_per_stripe
        stripes += 1
        if stripes >= config.stripes_per_belt:
            if belt < FINAL_BELT:
                belt += 1
                stripes = 0
                leveled_up = True
            else:
                # Mastery cap: surplus points are discarded
                stripes = config.stripes_per_belt
                points = 0
                break

    if belt == FINAL_BELT:
        stripes = min(stripes, config.stripes_per_belt)

    if leveled_up:
        log.info("Promoted to %s belt", BELTS[belt])
    return RankUpdate(
        state=RankState(belt_index=belt, stripes=stripes, points=points),
        awarded_points=awarded,
        leveled_up=leveled_up,
    )


def format_belt(state: RankState) -> str:
    return BELTS[min(state.belt_index, FINAL_BELT)]


def rank_state_to_dict(state: RankState) -> dict:
    return {"beltIndex": state.belt_index, "stripes": state.stripes, "points": state.points}


def rank_state_from_dict(data, config: RankConfig = DEFAULT_RANK_CONFIG) -> RankState:
    """Parse a stored state, rejecting one that holds more than two belts of progress within a belt."""
    if not isinstance(data, dict):
        raise ValueError("rank state must be an object")
    values = [data.get("beltIndex"), data.get("stripes"), data.get("points")]
    if not all(isinstance(v, int) and not isinstance(v, bool) and v >= 0 for v in values):
        raise ValueError(f"invalid rank state: {data}")
    belt, stripes, points = values
    if belt > FINAL_BELT:
        raise ValueError(f"belt index out of range: {belt}")
    per_belt = config.stripes_per_belt * config.points_per_stripe
    if stripes * config.points_per_stripe + points > 2 * per_belt:
        raise ValueError(f"rank state exceeds belt size: {data}")
    return RankState(belt_index=belt, stripes=stripes, points=points)


def rank_config_to_dict(config: RankConfig) -> dict:
    return {
        "pointsPerStripe": config.points_per_stripe,
        "stripesPerBelt": config.stripes_per_belt,
        "passPoints": config.pass_points,
        "failPoints": config.fail_points,
        "passScore": config.pass_score,
    }


def rank_config_from_dict(data) -> RankConfig:
    if not isinstance(data, dict):
        raise ValueError("rank config must be an object")
    try:
        return RankConfig(
            points_per_stripe=int(data["pointsPerStripe"]),
            stripes_per_belt=int(data["stripesPerBelt"]),
            pass_points=int(data["passPoints"]),
            fail_points=int(data["failPoints"]),
            pass_score=int(data["passScore"]),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"invalid rank config: {e}") from e
