import pytest

from gridwalk.sim.errors import OutOfBoundsError
from gridwalk.sim.grid import GridConfig
from gridwalk.sim.moves import MOVE_DOWN, MOVE_LEFT, MOVE_RIGHT, MOVE_UP, encode_moves
from gridwalk.sim.rng import derive_event_value
from gridwalk.sim.walk import replay_walk, roll_reward

SQUARE_BUFFER = bytes([0xE1]) * 32
ALL_DOWN_BUFFER = bytes(32)


def test_square_pattern_returns_to_start_tile() -> None:
    config = GridConfig()

    result = replay_walk(config, 1275, SQUARE_BUFFER, current_time=1_000)

    assert [step.position for step in result.steps[:4]] == [1225, 1224, 1274, 1275]
    assert len(result.steps) == 100
    assert result.end_position == 1275


def test_square_pattern_from_top_row_fails_on_first_up_move() -> None:
    with pytest.raises(OutOfBoundsError) as exc_info:
        replay_walk(GridConfig(), 1, SQUARE_BUFFER, current_time=0)

    assert exc_info.value.step_index == 0
    assert exc_info.value.position == -49


def test_square_pattern_hits_tile_zero_from_second_row_edge() -> None:
    with pytest.raises(OutOfBoundsError) as exc_info:
        replay_walk(GridConfig(), 51, SQUARE_BUFFER, current_time=0)

    assert exc_info.value.step_index == 1
    assert exc_info.value.position == 0


def test_square_pattern_needs_room_above_and_to_the_left() -> None:
    config = GridConfig(map_size=8)
    outcomes: dict[int, bool] = {}

    for start in range(1, config.map_size + 1):
        try:
            replay_walk(config, start, SQUARE_BUFFER, current_time=0)
        except OutOfBoundsError:
            outcomes[start] = False
        else:
            outcomes[start] = True

    assert outcomes == {1: False, 2: False, 3: False, 4: False, 5: True, 6: True, 7: True, 8: True}


def test_all_down_moves_leave_the_bottom_of_the_grid() -> None:
    with pytest.raises(OutOfBoundsError) as exc_info:
        replay_walk(GridConfig(), 1, ALL_DOWN_BUFFER, current_time=0)

    assert exc_info.value.step_index == 49
    assert exc_info.value.position == 2501


def test_horizontal_moves_follow_linear_tile_index() -> None:
    config = GridConfig(map_size=8)
    buffer = encode_moves([MOVE_RIGHT, MOVE_LEFT] * 50)

    result = replay_walk(config, 3, buffer, current_time=0)

    assert [step.position for step in result.steps[:2]] == [4, 3]


def test_moving_past_last_tile_fails() -> None:
    config = GridConfig(map_size=8)

    with pytest.raises(OutOfBoundsError):
        replay_walk(config, 8, encode_moves([MOVE_RIGHT]), current_time=0)
    with pytest.raises(OutOfBoundsError):
        replay_walk(config, 6, encode_moves([MOVE_DOWN]), current_time=0)


def test_every_step_uses_time_position_and_index_for_its_event_value() -> None:
    config = GridConfig()

    result = replay_walk(config, 1275, encode_moves([MOVE_UP, MOVE_DOWN] * 50), current_time=777)

    for step in result.steps:
        assert step.event_value == derive_event_value(777, step.position, step.step_index)
        assert step.reward == roll_reward(config, step.event_value)


def test_guaranteed_loot_with_single_unit_reward_pays_every_step() -> None:
    config = GridConfig(max_reward_per_tile=1, loot_probability_out_of_99=99)

    result = replay_walk(config, 1275, SQUARE_BUFFER, current_time=5)

    assert result.reward_total == 100
    assert all(step.reward == 1 for step in result.steps)


def test_zero_loot_probability_disables_rewards() -> None:
    config = GridConfig(loot_probability_out_of_99=0)

    result = replay_walk(config, 1275, SQUARE_BUFFER, current_time=5)

    assert result.reward_total == 0


def test_rewards_are_bounded_per_step_and_summed() -> None:
    config = GridConfig()

    for current_time in (1, 2, 3):
        result = replay_walk(config, 1275, SQUARE_BUFFER, current_time=current_time)
        assert all(step.reward == 0 or 1 <= step.reward <= config.max_reward_per_tile for step in result.steps)
        assert result.reward_total == sum(step.reward for step in result.steps)
        assert result.reward_total <= 100 * config.max_reward_per_tile


@pytest.mark.parametrize(
    ("event_value", "expected"),
    [(49, 1), (50, 0), (98, 0), (693, 1), (99 + 6, 1), (6, 7)],
)
def test_roll_reward_threshold_and_size(event_value: int, expected: int) -> None:
    assert roll_reward(GridConfig(), event_value) == expected


def test_start_must_be_a_valid_tile() -> None:
    with pytest.raises(ValueError, match="start position"):
        replay_walk(GridConfig(), 0, SQUARE_BUFFER, current_time=0)


def test_current_time_must_be_non_negative() -> None:
    with pytest.raises(ValueError, match="current_time"):
        replay_walk(GridConfig(), 1275, SQUARE_BUFFER, current_time=-1)
