# /routers/airdrop.py
"""
Airdrop API endpoints: eligibility check, signature-gated reveal and claim.
The periodic ledger refresh job is in scheduled_tasks/ledger_refresh.py
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_controller
from errors import AirdropError
from models import (
    ChallengeResponse,
    CheckRequest,
    CheckResponse,
    ClaimRequest,
    HistoryResponse,
    RecordsResponse,
    RevealRequest,
    RevealResponse,
    AirdropRecord,
)
from services.controller import AirdropController, require_connected
from services.identity import RequestIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/airdrop", tags=["Airdrop"])


def _to_http(e: AirdropError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail={"kind": e.kind, "message": e.message})


@router.get("/records", response_model=RecordsResponse)
async def list_records(controller: AirdropController = Depends(get_controller)):
    """Reloads and returns every airdrop record in the ledger."""
    try:
        records = await controller.refresh()
    except AirdropError as e:
        logger.warning(f"Loading airdrop records failed: {e}")
        raise _to_http(e)
    return RecordsResponse(records=records)


@router.post("/check", response_model=CheckResponse, summary="Check airdrop eligibility")
async def check_eligibility(req: CheckRequest, controller: AirdropController = Depends(get_controller)):
    """
    Decides eligibility for the given address and appends a new record.
    Repeated checks create additional records.
    """
    try:
        result = await controller.check_eligibility(RequestIdentity(req.address))
    except AirdropError as e:
        raise _to_http(e)
    except Exception as e:
        logger.error(f"Unexpected error in check_eligibility: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Check failed: {str(e)}")
    return CheckResponse(eligible=result.eligible, message=result.message, record=result.record)


@router.get("/challenge", response_model=ChallengeResponse)
async def get_challenge(controller: AirdropController = Depends(get_controller)):
    """Returns the exact message a holder must sign to reveal an amount."""
    params = controller.challenge
    return ChallengeResponse(
        message=controller.challenge_message(),
        publicKey=params.public_key,
        contractAddress=params.contract_address,
        chainId=params.chain_id,
        startTimestamp=params.start_timestamp,
        durationDays=params.duration_days,
    )


@router.post("/records/{record_id}/reveal", response_model=RevealResponse)
async def reveal_amount(
    record_id: int,
    req: RevealRequest,
    controller: AirdropController = Depends(get_controller),
):
    """
    Reveals a record's amount once the holder has signed the challenge.
    Calling it again while the amount is shown hides it.
    """
    identity = RequestIdentity(req.address, req.signature)
    try:
        require_connected(identity)
        record = await controller.find_record(record_id)
        result = await controller.reveal(record, identity)
    except AirdropError as e:
        raise _to_http(e)
    except Exception as e:
        logger.error(f"Unexpected error in reveal_amount: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Reveal failed: {str(e)}")
    return RevealResponse(record_id=result.record_id, visible=result.visible, amount=result.amount)


@router.post("/records/{record_id}/claim", response_model=AirdropRecord)
async def claim_airdrop(
    record_id: int,
    req: ClaimRequest,
    controller: AirdropController = Depends(get_controller),
):
    identity = RequestIdentity(req.address)
    try:
        require_connected(identity)
        record = await controller.find_record(record_id)
        return await controller.claim(record, identity)
    except AirdropError as e:
        raise _to_http(e)
    except Exception as e:
        logger.error(f"Unexpected error in claim_airdrop: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Claim failed: {str(e)}")


@router.get("/history", response_model=HistoryResponse)
async def get_history(controller: AirdropController = Depends(get_controller)):
    return HistoryResponse(history=controller.history_entries())
