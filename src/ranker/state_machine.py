"""Phase tracking for a single cluster ranking pass.

A pass moves strictly forward through its phases. Bucketing reads the
sorted order, and sorting reads the weights, so a phase can only be
entered from the one right before it.
"""

from enum import Enum

import structlog

from src.ranker.constants import COMPONENT_RANKER


logger = structlog.get_logger()


class RankerState(str, Enum):
    """Phase of a ranking pass.

    - CLUSTERS_READY: clusters received, nothing computed yet
    - WEIGHTED: each cluster has its category, title and weight
    - SORTED: weighted clusters are in stable descending weight order
    - BUCKETED: per-category and "any" buckets are built; the pass is over
    """

    CLUSTERS_READY = "CLUSTERS_READY"
    WEIGHTED = "WEIGHTED"
    SORTED = "SORTED"
    BUCKETED = "BUCKETED"


# Phase that may follow each phase; None marks the end of the pass
_NEXT_STATE: dict[RankerState, RankerState | None] = {
    RankerState.CLUSTERS_READY: RankerState.WEIGHTED,
    RankerState.WEIGHTED: RankerState.SORTED,
    RankerState.SORTED: RankerState.BUCKETED,
    RankerState.BUCKETED: None,
}


class RankerStateTransitionError(Exception):
    """A ranking pass tried to skip, repeat or rewind a phase."""

    def __init__(
        self,
        run_id: str,
        from_state: RankerState,
        to_state: RankerState,
    ) -> None:
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal ranker state transition for run '{run_id}': "
            f"{from_state.value} -> {to_state.value}"
        )


class RankerStateMachine:
    """Current phase of one ranking pass.

    ClusterRanker owns one machine per instance, which is what makes a
    ranker single-use: a second rank() call fails on the first transition.
    """

    def __init__(
        self,
        run_id: str,
        initial_state: RankerState = RankerState.CLUSTERS_READY,
    ) -> None:
        self._run_id = run_id
        self._state = initial_state
        self._log = logger.bind(component=COMPONENT_RANKER, run_id=run_id)

    @property
    def run_id(self) -> str:
        """Run this pass belongs to."""
        return self._run_id

    @property
    def state(self) -> RankerState:
        """Current phase."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Whether buckets have been built."""
        return _NEXT_STATE[self._state] is None

    def can_transition_to(self, target: RankerState) -> bool:
        """Whether target is the phase right after the current one."""
        return _NEXT_STATE[self._state] == target

    def transition_to(self, target: RankerState) -> None:
        """Advance to target.

        Raises:
            RankerStateTransitionError: If target is not the next phase.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_ranker_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise RankerStateTransitionError(self._run_id, self._state, target)

        self._log.debug(
            "ranker_state_transition",
            from_state=self._state.value,
            to_state=target.value,
        )
        self._state = target

    def to_weighted(self) -> None:
        """Mark every cluster as weighted."""
        self.transition_to(RankerState.WEIGHTED)

    def to_sorted(self) -> None:
        """Mark the weighted clusters as ordered."""
        self.transition_to(RankerState.SORTED)

    def to_bucketed(self) -> None:
        """Mark the output buckets as built."""
        self.transition_to(RankerState.BUCKETED)
