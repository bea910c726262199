# /scheduled_tasks/ledger_refresh.py
"""
Scheduled task that checks ledger availability and refreshes the cached airdrop records.
Failures are reported and left for the next run.
"""
from typing import Optional

from dependencies import get_controller
from errors import AirdropError
from services.controller import AirdropController


async def refresh_records_job(controller: Optional[AirdropController] = None) -> Optional[int]:
    """
    Reloads the record list through the controller.
    Returns the number of records loaded, or None when the ledger could not be read.
    Scheduled to run every LEDGER_REFRESH_MINUTES.
    """
    controller = controller or get_controller()
    try:
        records = await controller.refresh()
    except AirdropError as e:
        print(f"[LedgerRefresh] ❌ Ledger refresh failed ({e.kind}): {e}", flush=True)
        return None
    print(f"[LedgerRefresh] Loaded {len(records)} airdrop records", flush=True)
    return len(records)
