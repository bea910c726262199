# /services/tx_queue.py
"""
Serialized transaction submission for the ledger contract.
All broadcasts from this process pass through one lock so the wallet's
account sequence never races. Failures are reported once, never retried.
"""
import asyncio
import logging
from typing import List, Optional
from dataclasses import dataclass

import aiohttp
from secret_sdk.client.lcd import AsyncLCDClient
from secret_sdk.key.mnemonic import MnemonicKey
from secret_sdk.core.msg import Msg
from secret_sdk.exceptions import LCDResponseError

import config

logger = logging.getLogger(__name__)


@dataclass
class TxResult:
    """Result of a transaction submission."""
    success: bool
    tx_hash: Optional[str] = None
    code: int = 0
    raw_log: Optional[str] = None
    error: Optional[str] = None
    unreachable: bool = False


class TransactionQueue:
    """
    Singleton queue serializing ledger writes.

    Usage:
        result = await get_tx_queue().submit(msg_list=[msg], memo="ledger update")
        if not result.success:
            logger.error(result.error)
    """

    _instance: Optional['TransactionQueue'] = None

    def __init__(self):
        """Use get_tx_queue() instead."""
        self._queue_lock = asyncio.Lock()
        self._client: Optional[AsyncLCDClient] = None
        self._wallet = None

    @classmethod
    def get_instance(cls) -> 'TransactionQueue':
        if cls._instance is None:
            cls._instance = TransactionQueue()
        return cls._instance

    async def initialize(self) -> None:
        """Open the LCD client and wallet. Called on startup or on first use."""
        if self._client is None:
            self._client = AsyncLCDClient(
                chain_id=config.SECRET_CHAIN_ID,
                url=config.SECRET_LCD_URL
            )
            await self._client.__aenter__()
            self._wallet = self._client.wallet(MnemonicKey(config.get_wallet_key()))
            logger.info("TransactionQueue: Client initialized")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.__aexit__(None, None, None)
            self._client = None
            self._wallet = None
            logger.info("TransactionQueue: Client closed")

    async def submit(
        self,
        msg_list: List[Msg],
        gas: int = 500000,
        memo: str = "",
        confirmation_timeout: int = 30,
    ) -> TxResult:
        """
        Broadcast msg_list and wait for it to land on-chain.

        Returns a TxResult; exceptions from the client are folded into it.
        """
        if self._client is None:
            await self.initialize()

        async with self._queue_lock:
            try:
                tx = await self._wallet.create_and_broadcast_tx(
                    msg_list=msg_list,
                    gas=gas,
                    memo=memo
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"TransactionQueue: LCD unreachable: {e}")
                return TxResult(success=False, error=str(e), unreachable=True)
            except Exception as e:
                logger.exception(f"TransactionQueue: Exception during submit: {e}")
                return TxResult(success=False, error=str(e))

            if tx.code != 0:
                error_msg = tx.raw_log or f"Broadcast failed with code {tx.code}"
                logger.error(f"TransactionQueue: Broadcast failed: {error_msg}")
                return TxResult(success=False, code=tx.code, raw_log=tx.raw_log, error=error_msg)

            logger.info(f"TransactionQueue: Broadcast success, txhash={tx.txhash}")

            try:
                tx_info = await self._wait_for_confirmation(tx.txhash, confirmation_timeout)
            except LCDResponseError as e:
                return TxResult(success=False, tx_hash=tx.txhash, error=str(e))
            if tx_info is None:
                return TxResult(
                    success=False,
                    tx_hash=tx.txhash,
                    error="Transaction confirmation timed out"
                )
            if tx_info.code != 0:
                error_msg = getattr(tx_info, 'rawlog', None) or str(tx_info.logs)
                return TxResult(
                    success=False,
                    tx_hash=tx.txhash,
                    code=tx_info.code,
                    raw_log=error_msg,
                    error=f"Transaction failed on-chain: {error_msg}",
                )
            return TxResult(success=True, tx_hash=tx_info.txhash)

    async def _wait_for_confirmation(self, tx_hash: str, timeout: int):
        """Poll once per second until the tx is indexed or timeout elapses."""
        for _ in range(timeout):
            try:
                tx_info = await self._client.tx.tx_info(tx_hash)
                if tx_info:
                    return tx_info
            except LCDResponseError as e:
                if "tx not found" not in str(e).lower():
                    raise
            except (aiohttp.ClientError, asyncio.TimeoutError):
                pass
            await asyncio.sleep(1)
        return None

    @property
    def wallet_address(self) -> Optional[str]:
        if self._wallet:
            return self._wallet.key.acc_address
        return None

    @property
    def client(self) -> Optional[AsyncLCDClient]:
        return self._client

    @property
    def encryption_utils(self):
        if self._client:
            return self._client.encrypt_utils
        return None


def get_tx_queue() -> TransactionQueue:
    """Get the process-wide transaction queue."""
    return TransactionQueue.get_instance()
