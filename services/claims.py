# /services/claims.py
"""
Claim state machine: Unclaimed -> Claimed, terminal, never reverted.
"""
from typing import List, Sequence

from errors import AlreadyClaimed, NotEligible, RecordNotFound
from models import AirdropRecord


def check_claimable(record: AirdropRecord) -> None:
    if not record.eligibility:
        raise NotEligible()
    if record.claimed:
        raise AlreadyClaimed(f"Airdrop #{record.id} has already been claimed")


def compute_claim_transition(records: Sequence[AirdropRecord], record_id: int) -> List[AirdropRecord]:
    """
    Return a copy of `records` with `record_id` marked claimed.
    Every other record is passed through untouched.
    """
    target = next((record for record in records if record.id == record_id), None)
    if target is None:
        raise RecordNotFound(f"Airdrop #{record_id} not found")
    check_claimable(target)
    return [
        record.model_copy(update={"claimed": True}) if record.id == record_id else record
        for record in records
    ]
