# /config.py
import os
import logging
import secrets

# --- Environment & Ports ---
WEBHOOK_PORT = int(os.getenv("WEBHOOK_PORT", "8000"))
ALLOWED_ORIGINS = [
    "https://erth.network",
]

# --- Secret Network ---
SECRET_LCD_URL = os.getenv("SECRET_LCD_URL", "https://lcd.erth.network")
SECRET_CHAIN_ID = os.getenv("SECRET_CHAIN_ID", "secret-4")

# --- Ledger ---
# "memory" keeps records in-process, "file" in LEDGER_FILE, "secret" in the ledger contract
LEDGER_BACKEND = os.getenv("LEDGER_BACKEND", "file").lower()
LEDGER_FILE = os.getenv("LEDGER_FILE", "ledgerData.json")

# Ledger contract address and hash, required by the "secret" backend
LEDGER_CONTRACT = os.getenv("LEDGER_CONTRACT", "")
LEDGER_HASH = os.getenv("LEDGER_HASH", "")

# Key under which the JSON record list is stored
AIRDROP_STORE_KEY = "airdrops"

# --- Airdrop Policy ---
HISTORY_LIMIT = 10
ELIGIBILITY_RATIO = float(os.getenv("ELIGIBILITY_RATIO", "0.7"))
AIRDROP_MIN_AMOUNT = int(os.getenv("AIRDROP_MIN_AMOUNT", "100"))
AIRDROP_MAX_AMOUNT = int(os.getenv("AIRDROP_MAX_AMOUNT", "1099"))

# --- Reveal Challenge ---
CHALLENGE_DURATION_DAYS = int(os.getenv("CHALLENGE_DURATION_DAYS", "30"))
# Addresses whose revealed amount is remembered for the hide toggle
REVEAL_TRACKER_LIMIT = int(os.getenv("REVEAL_TRACKER_LIMIT", "1000"))
REVEAL_PUBLIC_KEY_HEX_DIGITS = 2000

# --- Scheduled Jobs ---
LEDGER_REFRESH_MINUTES = int(os.getenv("LEDGER_REFRESH_MINUTES", "5"))


# --- Key Loading ---
def get_wallet_key() -> str:
    """Loads the wallet mnemonic from the 'WALLET_KEY' environment variable."""
    key = os.getenv("WALLET_KEY")
    if not key:
        raise ValueError("FATAL: WALLET_KEY environment variable not set or is empty.")
    return key


def get_reveal_public_key() -> str:
    """
    Returns the public key material embedded in reveal challenges.

    Uses 'REVEAL_PUBLIC_KEY' when set, otherwise generates a fresh key for the
    lifetime of the process.
    """
    public_key = os.getenv("REVEAL_PUBLIC_KEY")
    if public_key:
        logging.info("Reveal public key loaded from environment variable.")
        return public_key
    logging.info("REVEAL_PUBLIC_KEY not set; generating a process-local reveal key.")
    return "0x" + secrets.token_hex(REVEAL_PUBLIC_KEY_HEX_DIGITS // 2)


def get_ledger_contract() -> tuple:
    """Returns (address, code_hash) of the ledger contract for the 'secret' backend."""
    if not LEDGER_CONTRACT:
        raise ValueError("FATAL: LEDGER_CONTRACT environment variable not set or is empty.")
    return LEDGER_CONTRACT, LEDGER_HASH or None
