# /services/eligibility.py
"""
Eligibility decision and record creation.

The policy itself is pluggable through EligibilityOracle; the random oracle
below is a placeholder.
"""
import random
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import config
from models import AirdropRecord
from services.codec import AmountCodec


@dataclass(frozen=True)
class EligibilityDecision:
    eligible: bool
    amount: int


class EligibilityOracle(Protocol):
    def decide(self, address: str) -> EligibilityDecision: ...


class RandomEligibilityOracle:
    """Eligible with probability `ratio`; amounts drawn uniformly from [min_amount, max_amount]."""

    def __init__(
        self,
        ratio: float = config.ELIGIBILITY_RATIO,
        min_amount: int = config.AIRDROP_MIN_AMOUNT,
        max_amount: int = config.AIRDROP_MAX_AMOUNT,
        rng: Optional[random.Random] = None,
    ):
        if min_amount <= 0 or max_amount < min_amount:
            raise ValueError("Airdrop amount range must be positive and non-empty")
        self.ratio = ratio
        self.min_amount = min_amount
        self.max_amount = max_amount
        self.rng = rng or random.Random()

    def decide(self, address: str) -> EligibilityDecision:
        eligible = self.rng.random() < self.ratio
        amount = self.rng.randint(self.min_amount, self.max_amount) if eligible else 0
        return EligibilityDecision(eligible=eligible, amount=amount)


def decide_eligibility(oracle: EligibilityOracle, address: str) -> EligibilityDecision:
    """Ask the oracle and enforce: eligible means amount > 0, ineligible means amount == 0."""
    decision = oracle.decide(address)
    if not decision.eligible:
        return EligibilityDecision(eligible=False, amount=0)
    if decision.amount <= 0:
        raise ValueError(f"Oracle granted eligibility with non-positive amount {decision.amount}")
    return decision


def next_record_id(records: Sequence[AirdropRecord]) -> int:
    return max((record.id for record in records), default=0) + 1


def build_record(
    records: Sequence[AirdropRecord],
    decision: EligibilityDecision,
    codec: AmountCodec,
    now: Optional[float] = None,
) -> AirdropRecord:
    return AirdropRecord(
        id=next_record_id(records),
        encryptedAmount=codec.encode(decision.amount),
        eligibility=decision.eligible,
        timestamp=int(time.time() if now is None else now),
        claimed=False,
    )


def outcome_message(decision: EligibilityDecision) -> str:
    return "You are eligible for airdrop!" if decision.eligible else "Not eligible this time"
