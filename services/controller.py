# /services/controller.py
"""
Airdrop controller: the effectful side of the core.

Holds the cached record list, the history log, which amounts are on display,
and one busy flag per operation kind. Every mutation reads a fresh snapshot
from the record store, applies a pure transition, and writes the whole list
back with the snapshot's version.
"""
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from errors import NotConnected, OperationInProgress, RecordNotFound, RemoteUnavailable
from models import AirdropRecord, HistoryRecord
from services.claims import check_claimable, compute_claim_transition
from services.codec import AmountCodec, default_codec
from services.decryption import ChallengeParams, RevealTracker, build_challenge_message, decode_for_reveal
from services.eligibility import EligibilityOracle, build_record, decide_eligibility, outcome_message
from services.history import HistoryLog
from services.identity import Identity
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

CHECKING = "checking"
DECRYPTING = "decrypting"
CLAIMING = "claiming"


@dataclass
class EligibilityResult:
    eligible: bool
    record: AirdropRecord
    message: str


@dataclass
class RevealResult:
    record_id: int
    amount: Optional[int]

    @property
    def visible(self) -> bool:
        return self.amount is not None


def require_connected(identity: Identity) -> str:
    if identity is None or not identity.connected or not identity.address:
        raise NotConnected()
    return identity.address


class AirdropController:
    def __init__(
        self,
        store: RecordStore,
        oracle: EligibilityOracle,
        challenge: ChallengeParams,
        codec: AmountCodec = default_codec,
        history: Optional[HistoryLog] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.oracle = oracle
        self.challenge = challenge
        self.codec = codec
        self.history = history or HistoryLog(clock=clock)
        self.reveals = RevealTracker()
        self.records: List[AirdropRecord] = []
        self._clock = clock
        self._busy: Set[str] = set()

    # --- busy flags ---

    def is_busy(self, operation: str) -> bool:
        return operation in self._busy

    @contextmanager
    def _busy_flag(self, operation: str):
        if operation in self._busy:
            raise OperationInProgress()
        self._busy.add(operation)
        try:
            yield
        finally:
            self._busy.discard(operation)

    # --- reads ---

    async def refresh(self) -> List[AirdropRecord]:
        """Check ledger availability and reload the cached record list."""
        available = await self.store.is_available()
        if not available:
            raise RemoteUnavailable("Ledger is not available")
        self.history.append("Contract Check", "Contract availability verified")
        self.records = await self.store.load()
        return list(self.records)

    def get_record(self, record_id: int) -> AirdropRecord:
        for record in self.records:
            if record.id == record_id:
                return record
        raise RecordNotFound(f"Airdrop #{record_id} not found")

    async def find_record(self, record_id: int) -> AirdropRecord:
        """Look the record up in the cache, reloading from the store on a miss."""
        try:
            return self.get_record(record_id)
        except RecordNotFound:
            self.records = await self.store.load()
            return self.get_record(record_id)

    def history_entries(self) -> List[HistoryRecord]:
        return self.history.entries()

    def challenge_message(self) -> str:
        return build_challenge_message(self.challenge)

    # --- operations ---

    async def check_eligibility(self, identity: Identity) -> EligibilityResult:
        address = require_connected(identity)
        with self._busy_flag(CHECKING):
            decision = decide_eligibility(self.oracle, address)
            snapshot = await self.store.snapshot()
            record = build_record(snapshot.records, decision, self.codec, now=self._clock())
            updated = [*snapshot.records, record]
            await self.store.persist(updated, expected_version=snapshot.version)
            self.records = updated
            logger.info(f"Eligibility check for {address}: eligible={decision.eligible}, record #{record.id}")
            self.history.append(
                "Eligibility Check",
                "Eligible for airdrop" if decision.eligible else "Not eligible",
            )
            return EligibilityResult(eligible=decision.eligible, record=record, message=outcome_message(decision))

    async def reveal(self, record: AirdropRecord, identity: Identity) -> RevealResult:
        """
        Reveal the record's amount, or hide it if it is already on display.

        A fresh reveal asks the identity to sign the challenge; a declined
        signature raises UserDeclined and leaves everything untouched.
        """
        address = require_connected(identity)
        if self.reveals.is_displayed(address, record.id):
            self.reveals.hide(address)
            return RevealResult(record_id=record.id, amount=None)

        with self._busy_flag(DECRYPTING):
            await identity.sign(self.challenge_message())
            amount = decode_for_reveal(record, self.codec)
            self.reveals.show(address, record.id, amount)
            self.history.append("Data Decryption", f"Decrypted amount: {amount}")
            return RevealResult(record_id=record.id, amount=amount)

    async def claim(self, record: AirdropRecord, identity: Identity) -> AirdropRecord:
        address = require_connected(identity)
        check_claimable(record)
        with self._busy_flag(CLAIMING):
            snapshot = await self.store.snapshot()
            updated = compute_claim_transition(snapshot.records, record.id)
            await self.store.persist(updated, expected_version=snapshot.version)
            self.records = updated
            logger.info(f"Airdrop #{record.id} claimed by {address}")
            self.history.append("Airdrop Claim", f"Claimed airdrop #{record.id}")
            return next(r for r in updated if r.id == record.id)
