# /dependencies.py
import logging
import time
from typing import Optional

import config
from services.controller import AirdropController
from services.decryption import ChallengeParams
from services.eligibility import RandomEligibilityOracle
from services.ledger import FileLedger, LedgerClient, MemoryLedger, SecretContractLedger
from services.record_store import RecordStore

logger = logging.getLogger(__name__)

_controller: Optional[AirdropController] = None


def build_ledger(backend: str = None) -> LedgerClient:
    """Create the ledger selected by LEDGER_BACKEND."""
    backend = (backend or config.LEDGER_BACKEND).lower()
    if backend == "memory":
        return MemoryLedger()
    if backend == "file":
        return FileLedger(config.LEDGER_FILE)
    if backend == "secret":
        contract, code_hash = config.get_ledger_contract()
        return SecretContractLedger(contract, code_hash)
    raise ValueError(f"FATAL: Unknown LEDGER_BACKEND '{backend}' (expected memory, file or secret).")


def ledger_address(ledger: LedgerClient) -> str:
    """Address embedded in reveal challenges for the given ledger."""
    if isinstance(ledger, SecretContractLedger):
        return ledger.contract
    if isinstance(ledger, FileLedger):
        return f"file:{ledger.path}"
    return "memory"


def build_controller(ledger: LedgerClient) -> AirdropController:
    challenge = ChallengeParams(
        public_key=config.get_reveal_public_key(),
        contract_address=ledger_address(ledger),
        chain_id=config.SECRET_CHAIN_ID,
        start_timestamp=int(time.time()),
        duration_days=config.CHALLENGE_DURATION_DAYS,
    )
    return AirdropController(
        store=RecordStore(ledger, key=config.AIRDROP_STORE_KEY),
        oracle=RandomEligibilityOracle(),
        challenge=challenge,
    )


def get_controller() -> AirdropController:
    """
    FastAPI dependency returning the process-wide controller,
    created on first use from the configured ledger backend.
    """
    global _controller
    if _controller is None:
        _controller = build_controller(build_ledger())
        logger.info(f"Airdrop controller initialized with '{config.LEDGER_BACKEND}' ledger")
    return _controller


def set_controller(controller: Optional[AirdropController]) -> None:
    """Replace the process-wide controller (None resets it)."""
    global _controller
    _controller = controller
