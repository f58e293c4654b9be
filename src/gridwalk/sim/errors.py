from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridwalk.sim.walk import WalkStep


class ExploreError(Exception):
    """Base class for explore failures; the caller's stats are never modified."""

    kind = "explore_error"


class ExhaustedError(ExploreError):
    kind = "exhausted"

    def __init__(self, *, retry_at: int) -> None:
        super().__init__(f"explore is on cooldown until {retry_at}")
        self.retry_at = retry_at


class OutOfBoundsError(ExploreError):
    """Raised at the first step off the grid.

    ``completed_steps`` holds the steps that stayed on the grid before it;
    none of them are committed.
    """

    kind = "out_of_bounds"

    def __init__(
        self,
        *,
        step_index: int,
        position: int,
        start_position: int | None = None,
        completed_steps: tuple[WalkStep, ...] = (),
    ) -> None:
        super().__init__(f"walk left the grid at step {step_index} (position={position})")
        self.step_index = step_index
        self.position = position
        self.start_position = start_position
        self.completed_steps = completed_steps
