"""
Tests for the declarative campaign workflow (``ledger_modules.ads.workflows``).

The graph is data; these tests pin its shape so a change to the lifecycle
is a deliberate, visible edit.
"""

import pytest

from ledger_kernel.domain.entities import CampaignStatus
from ledger_modules.ads.workflows import (
    CAMPAIGN_WORKFLOW,
    PLATFORM_MATCHES,
    find_transition,
)


class TestCampaignWorkflowShape:

    def test_states_match_campaign_status(self):
        assert set(CAMPAIGN_WORKFLOW.states) == {s.value for s in CampaignStatus}

    def test_initial_state_is_pending(self):
        assert CAMPAIGN_WORKFLOW.initial_state == "pending"
        assert CAMPAIGN_WORKFLOW.initial_state in CAMPAIGN_WORKFLOW.states

    def test_transitions_reference_known_states(self):
        for t in CAMPAIGN_WORKFLOW.transitions:
            assert t.from_state in CAMPAIGN_WORKFLOW.states
            assert t.to_state in CAMPAIGN_WORKFLOW.states

    def test_terminal_states(self):
        assert CAMPAIGN_WORKFLOW.terminal_states == frozenset({"completed", "cancelled"})

    def test_actions_from(self):
        assert set(CAMPAIGN_WORKFLOW.actions_from("pending")) == {"start", "complete", "cancel"}
        assert set(CAMPAIGN_WORKFLOW.actions_from("running")) == {"complete", "cancel"}
        assert CAMPAIGN_WORKFLOW.actions_from("completed") == ()

    def test_only_completion_moves_balances(self):
        moving = [t for t in CAMPAIGN_WORKFLOW.transitions if t.moves_balances]
        assert {t.action for t in moving} == {"complete"}
        assert all(t.guard is PLATFORM_MATCHES for t in moving)


class TestFindTransition:

    @pytest.mark.parametrize(
        "from_state, action, to_state",
        [
            ("pending", "start", "running"),
            ("pending", "complete", "completed"),
            ("running", "complete", "completed"),
            ("pending", "cancel", "cancelled"),
            ("running", "cancel", "cancelled"),
        ],
    )
    def test_legal(self, from_state, action, to_state):
        assert find_transition(CAMPAIGN_WORKFLOW, from_state, action).to_state == to_state

    @pytest.mark.parametrize(
        "from_state, action",
        [
            ("running", "start"),
            ("completed", "complete"),
            ("completed", "cancel"),
            ("cancelled", "complete"),
            ("cancelled", "start"),
            ("pending", "archive"),
        ],
    )
    def test_illegal(self, from_state, action):
        assert find_transition(CAMPAIGN_WORKFLOW, from_state, action) is None
