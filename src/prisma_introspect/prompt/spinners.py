"""Per-element spinner state for asynchronous select actions."""

from __future__ import annotations

from enum import Enum


class SpinnerState(str, Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SpinnerTracker:
    """Stores the spinner state of each element index.

    The tracker does not guard against double starts; the prompt controller
    checks ``is_running`` before invoking an action.
    """

    def __init__(self) -> None:
        self._states: dict[int, SpinnerState] = {}

    def start(self, index: int) -> None:
        self._states[index] = SpinnerState.RUNNING

    def finish(self, index: int, outcome: SpinnerState | str) -> None:
        """Move *index* to a terminal state.

        Raises:
            ValueError: If *outcome* is ``running``.
        """
        state = SpinnerState(outcome)
        if state is SpinnerState.RUNNING:
            raise ValueError("A spinner can only finish as 'succeeded' or 'failed'.")
        self._states[index] = state

    def get(self, index: int) -> SpinnerState | None:
        return self._states.get(index)

    def is_running(self, index: int) -> bool:
        return self._states.get(index) is SpinnerState.RUNNING

    def reset(self) -> None:
        self._states.clear()
