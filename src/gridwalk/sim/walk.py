from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from gridwalk.sim.errors import ExhaustedError, OutOfBoundsError
from gridwalk.sim.grid import LOOT_ROLL_MODULUS, GridConfig
from gridwalk.sim.moves import MOVE_DOWN, MOVE_LEFT, MOVE_NAMES, MOVE_RIGHT, MOVE_UP, iter_moves, require_move_buffer
from gridwalk.sim.registry import PlayerRegistry, PlayerStats
from gridwalk.sim.rng import CallerId, caller_token, derive_event_value, start_position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkStep:
    step_index: int
    move: int
    position: int
    event_value: int
    reward: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_index": self.step_index,
            "move": MOVE_NAMES[self.move],
            "position": self.position,
            "event_value": format(self.event_value, "064x"),
            "reward": self.reward,
        }


@dataclass(frozen=True)
class WalkResult:
    start_position: int
    steps: tuple[WalkStep, ...]
    reward_total: int

    @property
    def end_position(self) -> int:
        return self.steps[-1].position if self.steps else self.start_position

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_position": self.start_position,
            "end_position": self.end_position,
            "reward_total": self.reward_total,
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass(frozen=True)
class RewardReceipt:
    caller_id: CallerId
    last_explore_time: int
    reward_earned: int
    nonce: int
    total_reward_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "caller_id": caller_token(self.caller_id),
            "last_explore_time": self.last_explore_time,
            "reward_earned": self.reward_earned,
            "nonce": self.nonce,
            "total_reward_count": self.total_reward_count,
        }


def _require_time(current_time: Any) -> int:
    if isinstance(current_time, bool) or not isinstance(current_time, int) or current_time < 0:
        raise ValueError("current_time must be a non-negative integer")
    return current_time


def roll_reward(config: GridConfig, event_value: int) -> int:
    """Return the loot found on a tile, or 0; found loot is always in 1..max_reward_per_tile."""
    if event_value % LOOT_ROLL_MODULUS < config.loot_probability_out_of_99:
        return event_value % config.max_reward_per_tile + 1
    return 0


def replay_walk(config: GridConfig, start: int, move_buffer: bytes, current_time: int) -> WalkResult:
    """Replay every decoded move from ``start`` and roll loot on each visited tile.

    Raises ``OutOfBoundsError`` at the first step outside ``1..map_size``.
    Positions are plain ints, so a step above the top row goes negative
    instead of wrapping back into range.
    """
    _require_time(current_time)
    if not config.contains(start):
        raise ValueError(f"start position must be within 1..{config.map_size}; got {start}")

    row_width = config.row_width
    deltas = {
        MOVE_UP: -row_width,
        MOVE_LEFT: -1,
        MOVE_RIGHT: 1,
        MOVE_DOWN: row_width,
    }

    position = start
    reward_total = 0
    steps: list[WalkStep] = []
    for step_index, move in enumerate(iter_moves(move_buffer)):
        position += deltas[move]
        if not config.contains(position):
            raise OutOfBoundsError(
                step_index=step_index,
                position=position,
                start_position=start,
                completed_steps=tuple(steps),
            )
        event_value = derive_event_value(current_time, position, step_index)
        reward = roll_reward(config, event_value)
        reward_total += reward
        steps.append(
            WalkStep(
                step_index=step_index,
                move=move,
                position=position,
                event_value=event_value,
                reward=reward,
            )
        )

    return WalkResult(start_position=start, steps=tuple(steps), reward_total=reward_total)


class GridWalkSimulator:
    """Runs explore calls against a player registry.

    Each call is all-or-nothing: cooldown failures and walks that leave the
    grid commit nothing. Calls from one caller are serialized on that caller's
    registry lock; different callers do not contend.
    """

    def __init__(self, registry: PlayerRegistry, config: GridConfig | None = None) -> None:
        self.registry = registry
        self.config = config if config is not None else GridConfig()

    def explore(self, caller_id: CallerId, move_buffer: bytes, current_time: int) -> RewardReceipt:
        receipt, _ = self.explore_traced(caller_id, move_buffer, current_time)
        return receipt

    def explore_traced(
        self,
        caller_id: CallerId,
        move_buffer: bytes,
        current_time: int,
    ) -> tuple[RewardReceipt, WalkResult]:
        """Run ``explore`` and also return the walk that was committed."""
        caller_token(caller_id)
        _require_time(current_time)
        move_buffer = require_move_buffer(move_buffer)

        with self.registry.caller_lock(caller_id):
            stats = self.registry.get(caller_id)
            self._check_cooldown(caller_id, stats, current_time)

            start = start_position(self.config, caller_id, stats.nonce)
            try:
                result = replay_walk(self.config, start, move_buffer, current_time)
            except OutOfBoundsError as exc:
                logger.debug(
                    "explore rejected caller=%r nonce=%d start=%d step=%d position=%d",
                    caller_id,
                    stats.nonce,
                    start,
                    exc.step_index,
                    exc.position,
                )
                raise

            updated = PlayerStats(
                last_explore_time=current_time,
                total_reward_count=stats.total_reward_count + result.reward_total,
                nonce=stats.nonce + 1,
            )
            self.registry.commit(caller_id, updated)

        logger.info(
            "explore committed caller=%r nonce=%d reward=%d total=%d",
            caller_id,
            updated.nonce,
            result.reward_total,
            updated.total_reward_count,
        )
        receipt = RewardReceipt(
            caller_id=caller_id,
            last_explore_time=updated.last_explore_time,
            reward_earned=result.reward_total,
            nonce=updated.nonce,
            total_reward_count=updated.total_reward_count,
        )
        return receipt, result

    def preview(self, caller_id: CallerId, move_buffer: bytes, current_time: int) -> WalkResult:
        """Dry-run the caller's next walk; ignores the cooldown and commits nothing."""
        caller_token(caller_id)
        stats = self.registry.get(caller_id)
        start = start_position(self.config, caller_id, stats.nonce)
        return replay_walk(self.config, start, move_buffer, current_time)

    def _check_cooldown(self, caller_id: CallerId, stats: PlayerStats, current_time: int) -> None:
        # A caller that has never explored is never on cooldown.
        if stats.last_explore_time == 0:
            return
        # A clock behind the last explore gives negative elapsed time, which always fails.
        if current_time - stats.last_explore_time < self.config.cooldown_duration:
            retry_at = stats.last_explore_time + self.config.cooldown_duration
            logger.debug("explore rejected caller=%r on cooldown until %d", caller_id, retry_at)
            raise ExhaustedError(retry_at=retry_at)
