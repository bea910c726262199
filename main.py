# /main.py
import uvicorn
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.asyncio import AsyncIOScheduler

import config
from dependencies import get_controller
from errors import AirdropError
from logging_config import LOGGING_CONFIG
from services.tx_queue import get_tx_queue

logger = logging.getLogger(__name__)
# Import the individual router modules
from routers import airdrop
# Import scheduled tasks
from scheduled_tasks import refresh_records_job

app = FastAPI(
    title="AirdropShield API",
    description="Confidential airdrop eligibility, reveal and claim services.",
    version="1.0.0"
)

# --- Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# --- Event Handlers & Scheduler ---
scheduler = AsyncIOScheduler()


@app.on_event("startup")
async def startup_event():
    """Loads the airdrop records and starts the scheduler."""
    print("=" * 80, flush=True)
    print("APPLICATION STARTUP BEGINNING", flush=True)
    print("=" * 80, flush=True)

    if config.LEDGER_BACKEND == "secret":
        print("Connecting to Secret Network ledger contract...", flush=True)
        await get_tx_queue().initialize()

    controller = get_controller()
    try:
        records = await controller.refresh()
        print(f"Loaded {len(records)} airdrop records from '{config.LEDGER_BACKEND}' ledger", flush=True)
    except AirdropError as e:
        # Not fatal: requests retry the ledger on their own
        print(f"[Startup] Initial ledger load failed: {e}", flush=True)

    # Refresh the cached records periodically
    scheduler.add_job(refresh_records_job, 'interval', minutes=config.LEDGER_REFRESH_MINUTES)
    scheduler.start()
    print("Startup complete. Ledger refresh scheduler is running.")


@app.on_event("shutdown")
async def shutdown_event():
    """Shuts down the scheduler and the ledger client."""
    scheduler.shutdown()
    await get_tx_queue().close()
    print("Application shutdown.")


# --- API Routers ---
app.include_router(airdrop.router, tags=["Airdrop"])


@app.get("/", tags=["Health Check"])
async def read_root():
    return {"message": "Welcome to the AirdropShield API"}

# --- Run Server ---
if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.WEBHOOK_PORT,
        log_config=LOGGING_CONFIG,
        reload=True
    )
