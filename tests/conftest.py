"""Shared fixtures: in-memory ledger, deterministic oracle and scripted identities."""
from typing import List, Optional

import pytest

from services.controller import AirdropController
from services.decryption import ChallengeParams
from services.eligibility import EligibilityDecision
from services.history import HistoryLog
from services.ledger import MemoryLedger
from services.record_store import RecordStore
from errors import UserDeclined

TEST_ADDRESS = "secret1qypqxpq9qcrsszg2pvxq6rs0zqg3yyc5lzv7xu"
FIXED_NOW = 1_700_000_000


class FixedOracle:
    """Returns the queued decisions in order, repeating the last one."""

    def __init__(self, *decisions: EligibilityDecision):
        self.decisions = list(decisions) or [EligibilityDecision(True, 500)]
        self.calls: List[str] = []

    def decide(self, address: str) -> EligibilityDecision:
        self.calls.append(address)
        if len(self.decisions) > 1:
            return self.decisions.pop(0)
        return self.decisions[0]


class ScriptedIdentity:
    """Identity whose signing answer can be switched between calls."""

    def __init__(self, address: Optional[str] = TEST_ADDRESS, accept: bool = True):
        self.address = address
        self.accept = accept
        self.signed: List[str] = []

    @property
    def connected(self) -> bool:
        return bool(self.address)

    async def sign(self, message: str) -> str:
        if not self.accept:
            raise UserDeclined()
        self.signed.append(message)
        return "c2lnbmF0dXJl"


@pytest.fixture
def challenge() -> ChallengeParams:
    return ChallengeParams(
        public_key="0xabc123",
        contract_address="secret1ledgercontract",
        chain_id="secret-4",
        start_timestamp=FIXED_NOW,
        duration_days=30,
    )


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture
def store(ledger: MemoryLedger) -> RecordStore:
    return RecordStore(ledger)


@pytest.fixture
def oracle() -> FixedOracle:
    return FixedOracle(EligibilityDecision(eligible=True, amount=500))


@pytest.fixture
def controller(store: RecordStore, oracle: FixedOracle, challenge: ChallengeParams) -> AirdropController:
    clock = lambda: FIXED_NOW  # noqa: E731
    return AirdropController(
        store=store,
        oracle=oracle,
        challenge=challenge,
        history=HistoryLog(clock=clock),
        clock=clock,
    )


@pytest.fixture
def identity() -> ScriptedIdentity:
    return ScriptedIdentity()
