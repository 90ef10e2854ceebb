"""Tests for the belt and stripe rank engine."""
import pytest

from expert_maker.models import RankConfig, RankState
from expert_maker.rank import (
    BELTS, DEFAULT_RANK_CONFIG, FINAL_BELT, apply_test_result, format_belt, initial_rank_state,
    rank_config_from_dict, rank_config_to_dict, rank_state_from_dict, rank_state_to_dict,
)


def test_initial_state():
    assert initial_rank_state() == RankState(0, 0, 0)
    assert format_belt(initial_rank_state()) == "White"


def test_belt_ladder():
    assert BELTS == ["White", "Blue", "Purple", "Brown", "Black", "Coral"]
    assert FINAL_BELT == 5


def test_pass_awards_pass_points():
    update = apply_test_result(initial_rank_state(), DEFAULT_RANK_CONFIG, 90)
    assert update.awarded_points == 2
    assert update.state == RankState(0, 0, 2)
    assert update.leveled_up is False


def test_fail_awards_fail_points():
    update = apply_test_result(initial_rank_state(), DEFAULT_RANK_CONFIG, 89)
    assert update.awarded_points == 1
    assert update.state == RankState(0, 0, 1)


def test_points_carry_into_stripe():
    update = apply_test_result(RankState(0, 0, 2), DEFAULT_RANK_CONFIG, 100)
    assert update.state == RankState(0, 1, 1)
    assert update.leveled_up is False


def test_stripes_carry_into_belt():
    update = apply_test_result(RankState(0, 3, 2), DEFAULT_RANK_CONFIG, 95)
    assert update.state == RankState(1, 0, 1)
    assert update.leveled_up is True


def test_large_award_carries_repeatedly():
    config = RankConfig(points_per_stripe=3, stripes_per_belt=2, pass_points=7, fail_points=1, pass_score=50)
    update = apply_test_result(initial_rank_state(), config, 80)
    assert update.state == RankState(1, 0, 1)
    assert update.leveled_up is True


def test_does_not_mutate_input():
    state = RankState(0, 3, 2)
    apply_test_result(state, DEFAULT_RANK_CONFIG, 100)
    assert state == RankState(0, 3, 2)


def test_final_belt_caps_and_discards_points():
    update = apply_test_result(RankState(FINAL_BELT, 3, 2), DEFAULT_RANK_CONFIG, 100)
    assert update.state == RankState(FINAL_BELT, 4, 0)
    assert update.leveled_up is False


def test_final_belt_never_exceeds_caps():
    state = RankState(FINAL_BELT, 4, 0)
    for _ in range(10):
        state = apply_test_result(state, DEFAULT_RANK_CONFIG, 100).state
        assert state.belt_index == FINAL_BELT
        assert state.stripes == 4
        assert state.points < DEFAULT_RANK_CONFIG.points_per_stripe


def test_invariants_hold_over_long_run():
    state = initial_rank_state()
    for i in range(200):
        state = apply_test_result(state, DEFAULT_RANK_CONFIG, 100 if i % 3 else 40).state
        assert 0 <= state.belt_index <= FINAL_BELT
        assert state.points < DEFAULT_RANK_CONFIG.points_per_stripe
        if state.belt_index < FINAL_BELT:
            assert state.stripes < DEFAULT_RANK_CONFIG.stripes_per_belt
    assert state.belt_index == FINAL_BELT


def test_state_dict_round_trip():
    state = RankState(2, 1, 2)
    assert rank_state_to_dict(state) == {"beltIndex": 2, "stripes": 1, "points": 2}
    assert rank_state_from_dict(rank_state_to_dict(state)) == state


@pytest.mark.parametrize("data", [
    None,
    [],
    {"beltIndex": 0, "stripes": 0},
    {"beltIndex": -1, "stripes": 0, "points": 0},
    {"beltIndex": 9, "stripes": 0, "points": 0},
    {"beltIndex": True, "stripes": 0, "points": 0},
    {"beltIndex": "1", "stripes": 0, "points": 0},
    {"beltIndex": 0, "stripes": 40, "points": 99},
    {"beltIndex": 0, "stripes": 0, "points": 25},
])
def test_state_from_dict_rejects(data):
    with pytest.raises(ValueError):
        rank_state_from_dict(data)


def test_config_dict_round_trip():
    config = RankConfig(points_per_stripe=5, stripes_per_belt=2, pass_points=3, fail_points=0, pass_score=80)
    assert rank_config_from_dict(rank_config_to_dict(config)) == config


@pytest.mark.parametrize("data", [
    "config",
    {"pointsPerStripe": 3},
    {"pointsPerStripe": 0, "stripesPerBelt": 4, "passPoints": 2, "failPoints": 1, "passScore": 90},
])
def test_config_from_dict_rejects(data):
    with pytest.raises(ValueError):
        rank_config_from_dict(data)


def test_state_from_dict_accepts_capped_final_belt():
    assert rank_state_from_dict({"beltIndex": 5, "stripes": 4, "points": 2}) == RankState(5, 4, 2)


def test_state_from_dict_bounds_follow_config():
    config = RankConfig(points_per_stripe=10, stripes_per_belt=5)
    data = {"beltIndex": 1, "stripes": 4, "points": 60}
    assert rank_state_from_dict(data, config) == RankState(1, 4, 60)
    with pytest.raises(ValueError):
        rank_state_from_dict(data)
