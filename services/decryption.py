# /services/decryption.py
"""
Signature-gated reveal of an airdrop amount.

The holder signs a canonical challenge built from the reveal key material,
the ledger address, the chain id and a validity window. Producing the
signature is taken as authorization; no verification step follows.
"""
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple

import config
from models import AirdropRecord
from services.codec import AmountCodec


@dataclass(frozen=True)
class ChallengeParams:
    public_key: str
    contract_address: str
    chain_id: str
    start_timestamp: int
    duration_days: int


def build_challenge_message(params: ChallengeParams) -> str:
    """Field order and labels are fixed; signers and verifiers must agree on them byte for byte."""
    return (
        f"publickey:{params.public_key}\n"
        f"contractAddresses:{params.contract_address}\n"
        f"contractsChainId:{params.chain_id}\n"
        f"startTimestamp:{params.start_timestamp}\n"
        f"durationDays:{params.duration_days}"
    )


def decode_for_reveal(record: AirdropRecord, codec: AmountCodec) -> int:
    return codec.decode(record.encryptedAmount)


class RevealTracker:
    """
    Which decrypted amount each identity currently has on display.

    Holds at most `limit` addresses; showing a value for a new address past
    the limit forgets the least recently used one.
    """

    def __init__(self, limit: int = config.REVEAL_TRACKER_LIMIT):
        self.limit = limit
        self._displayed: "OrderedDict[str, Tuple[int, int]]" = OrderedDict()

    def displayed(self, address: str) -> Optional[Tuple[int, int]]:
        return self._displayed.get(address)

    def is_displayed(self, address: str, record_id: int) -> bool:
        current = self._displayed.get(address)
        return current is not None and current[0] == record_id

    def show(self, address: str, record_id: int, amount: int) -> None:
        self._displayed[address] = (record_id, amount)
        self._displayed.move_to_end(address)
        while len(self._displayed) > self.limit:
            self._displayed.popitem(last=False)

    def hide(self, address: str) -> None:
        self._displayed.pop(address, None)

    def __len__(self) -> int:
        return len(self._displayed)
