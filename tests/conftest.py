"""Shared document fixtures for the CDM Trade Intake tests."""

import copy

import pytest

from tests.documents import make_party, make_trade, make_trade_state


@pytest.fixture
def two_party_trade():
    """Trade payload with two parties and no counterparty list."""
    return make_trade()


@pytest.fixture
def trade_state_doc(two_party_trade):
    """{"trade": ..., "state": ...} document."""
    return make_trade_state(two_party_trade)


@pytest.fixture
def one_party_trade():
    """Trade payload with a single party carrying no LEI."""
    return make_trade(parties=[make_party("solo", "Solo Party", other_id="SOLOBIC1")])


@pytest.fixture
def zero_party_trade_state():
    return make_trade_state(make_trade(parties=[]))


@pytest.fixture
def workflow_step_doc(trade_state_doc):
    return {
        "businessEvent": {
            "intent": "ContractFormation",
            "after": [copy.deepcopy(trade_state_doc)],
        }
    }


@pytest.fixture
def reportable_event_doc(workflow_step_doc):
    return {
        "originatingWorkflowStep": copy.deepcopy(workflow_step_doc),
        "reportableInformation": {},
    }


@pytest.fixture
def business_event_doc(trade_state_doc):
    return {
        "intent": "ContractFormation",
        "eventDate": "2024-03-15",
        "after": [copy.deepcopy(trade_state_doc)],
    }


@pytest.fixture
def empty_after_envelope_doc():
    return {"originatingWorkflowStep": {"businessEvent": {"after": []}}}
