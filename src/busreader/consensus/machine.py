"""Lifecycle of the consensus engine."""

from __future__ import annotations

from statemachine import State, StateMachine


class ConsensusStateMachine(StateMachine):
    """Idle until the first reading, then alternates between accumulating and evaluating."""

    idle = State("Idle", initial=True)
    accumulating = State("Accumulating")
    evaluating = State("Evaluating")
    stopped = State("Stopped", final=True)

    record = idle.to(accumulating) | accumulating.to.itself()
    begin_evaluation = idle.to.itself() | accumulating.to(evaluating)
    finish_evaluation = evaluating.to(accumulating)
    shutdown = idle.to(stopped) | accumulating.to(stopped) | evaluating.to(stopped)

    @property
    def state_name(self) -> str:
        state = self.current_state
        return getattr(state, "id", str(state))
