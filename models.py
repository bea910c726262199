# /models.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List


class AirdropRecord(BaseModel):
    """
    One issued-or-denied distribution decision, as stored in the ledger.

    Field names match the persisted JSON layout.
    """
    id: int = Field(gt=0)
    encryptedAmount: str
    eligibility: bool
    timestamp: int
    claimed: bool = False

    @field_validator("encryptedAmount", mode="before")
    @classmethod
    def _legacy_numeric_amount(cls, value):
        # records written before the FHE- tag may hold a bare number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class HistoryRecord(BaseModel):
    action: str
    timestamp: int
    details: str


class CheckRequest(BaseModel):
    address: str


class RevealRequest(BaseModel):
    """
    Request model for the reveal endpoint.

    Fields:
    - address: the connected wallet address (required)
    - signature: signature over the current challenge message; omitted when
      the holder declined to sign
    """
    address: str
    signature: Optional[str] = None


class ClaimRequest(BaseModel):
    address: str


class CheckResponse(BaseModel):
    eligible: bool
    message: str
    record: AirdropRecord


class ChallengeResponse(BaseModel):
    message: str
    publicKey: str
    contractAddress: str
    chainId: str
    startTimestamp: int
    durationDays: int


class RevealResponse(BaseModel):
    record_id: int
    visible: bool
    amount: Optional[int] = None


class RecordsResponse(BaseModel):
    records: List[AirdropRecord]


class HistoryResponse(BaseModel):
    history: List[HistoryRecord]
