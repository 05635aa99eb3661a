"""
ledger_modules.ads.workflows
============================

Responsibility:
    Declarative state machine for the ad campaign lifecycle.  The ad
    ledger functions consult ``CAMPAIGN_WORKFLOW`` to decide whether an
    action is legal from a campaign's current status; this module only
    declares the graph and its guards.

Architecture:
    Module layer (ledger_modules).  Pure data declarations -- no I/O, no
    imports from services.

Invariants enforced:
    - The graph is frozen data; it cannot change at runtime.
    - ``completed`` and ``cancelled`` are terminal: no transition leaves
      them.
    - Only the ``complete`` transition has balance effects
      (``moves_balances=True``).

Failure modes:
    - Invalid transition request -> ``find_transition`` returns None and
      the ledger function raises InvalidStateError.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledger_kernel.domain.entities import CampaignStatus


@dataclass(frozen=True)
class Guard:
    """
    Named precondition of a transition.

    Declared here for documentation and tests; ``ledger.complete_campaign``
    checks it and raises the matching error.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """One legal edge: ``action`` takes a campaign from ``from_state`` to ``to_state``."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    moves_balances: bool = False


@dataclass(frozen=True)
class Workflow:
    """
    States and edges of one lifecycle.

    Every state named by ``initial_state`` or by a transition is listed in
    ``states``.  A state with no outgoing edge is terminal.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]

    @property
    def terminal_states(self) -> frozenset[str]:
        sources = {t.from_state for t in self.transitions}
        return frozenset(s for s in self.states if s not in sources)

    def actions_from(self, state: str) -> tuple[str, ...]:
        return tuple(t.action for t in self.transitions if t.from_state == state)


def find_transition(workflow: Workflow, from_state: str, action: str) -> Transition | None:
    """The transition for ``action`` out of ``from_state``, or None if illegal."""
    for transition in workflow.transitions:
        if transition.from_state == from_state and transition.action == action:
            return transition
    return None


# Guards

PLATFORM_MATCHES = Guard(
    name="platform_matches",
    description="Selected ad account runs on the campaign's platform",
)


# Campaign lifecycle

_PENDING = CampaignStatus.PENDING.value
_RUNNING = CampaignStatus.RUNNING.value
_COMPLETED = CampaignStatus.COMPLETED.value
_CANCELLED = CampaignStatus.CANCELLED.value

CAMPAIGN_WORKFLOW = Workflow(
    name="ad_campaign",
    description="Ad request from submission to completion or cancellation",
    initial_state=_PENDING,
    states=(
        _PENDING,
        _RUNNING,
        _COMPLETED,
        _CANCELLED,
    ),
    transitions=(
        Transition(
            from_state=_PENDING,
            to_state=_RUNNING,
            action="start",
        ),
        Transition(
            from_state=_PENDING,
            to_state=_COMPLETED,
            action="complete",
            guard=PLATFORM_MATCHES,
            moves_balances=True,
        ),
        Transition(
            from_state=_RUNNING,
            to_state=_COMPLETED,
            action="complete",
            guard=PLATFORM_MATCHES,
            moves_balances=True,
        ),
        Transition(
            from_state=_PENDING,
            to_state=_CANCELLED,
            action="cancel",
        ),
        Transition(
            from_state=_RUNNING,
            to_state=_CANCELLED,
            action="cancel",
        ),
    ),
)
