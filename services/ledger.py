# /services/ledger.py
"""
Key/value ledger collaborators backing the record store.

Every backend exposes the same three awaitable calls: is_available, get_data
and set_data. Values are raw bytes; a missing key reads as b"".
"""
import asyncio
import base64
import json
import logging
import os
from typing import Dict, Optional, Protocol

import aiohttp
from secret_sdk.core.wasm import MsgExecuteContract
from secret_sdk.exceptions import LCDResponseError

from errors import RemoteUnavailable, Unknown, UserDeclined
from services.tx_queue import TransactionQueue, get_tx_queue

logger = logging.getLogger(__name__)


class LedgerClient(Protocol):
    async def is_available(self) -> bool: ...

    async def get_data(self, key: str) -> bytes: ...

    async def set_data(self, key: str, value: bytes) -> bool: ...


class MemoryLedger:
    """Process-local ledger. Contents are lost on restart."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None, available: bool = True):
        self.data: Dict[str, bytes] = dict(initial or {})
        self.available = available

    async def is_available(self) -> bool:
        return self.available

    async def get_data(self, key: str) -> bytes:
        if not self.available:
            raise RemoteUnavailable("Ledger is not reachable")
        return self.data.get(key, b"")

    async def set_data(self, key: str, value: bytes) -> bool:
        if not self.available:
            raise RemoteUnavailable("Ledger is not reachable")
        self.data[key] = bytes(value)
        return True


class FileLedger:
    """
    Ledger persisted to a single JSON file mapping keys to base64 values.
    The whole file is rewritten on every set_data.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except OSError as e:
            raise RemoteUnavailable(f"Could not read ledger file {self.path}: {e}")
        except json.JSONDecodeError:
            logger.warning(f"Ledger file {self.path} is not valid JSON; treating it as empty")
            return {}
        return data if isinstance(data, dict) else {}

    async def is_available(self) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        return os.path.isdir(directory) and os.access(directory, os.W_OK)

    async def get_data(self, key: str) -> bytes:
        encoded = self._read_all().get(key)
        if not encoded:
            return b""
        try:
            return base64.b64decode(encoded)
        except ValueError:
            # Undecodable entries are handed on as-is; the record store rejects them
            return encoded.encode("utf-8")

    async def set_data(self, key: str, value: bytes) -> bool:
        data = self._read_all()
        data[key] = base64.b64encode(value).decode("ascii")
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RemoteUnavailable(f"Could not write ledger file {self.path}: {e}")
        logger.debug(f"Wrote {len(value)} bytes to ledger key '{key}'")
        return True


class SecretContractLedger:
    """
    Ledger stored in a Secret Network contract.

    Queries go through the transaction queue's LCD client; writes are
    broadcast as set_data executions through the same queue.
    """

    def __init__(self, contract: str, code_hash: Optional[str] = None,
                 tx_queue: Optional[TransactionQueue] = None):
        self.contract = contract
        self.code_hash = code_hash
        self._tx_queue = tx_queue

    @property
    def tx_queue(self) -> TransactionQueue:
        if self._tx_queue is None:
            self._tx_queue = get_tx_queue()
        return self._tx_queue

    async def _query(self, query_msg: dict):
        queue = self.tx_queue
        if queue.client is None:
            await queue.initialize()
        try:
            if self.code_hash:
                return await queue.client.wasm.contract_query(self.contract, query_msg, self.code_hash)
            return await queue.client.wasm.contract_query(self.contract, query_msg)
        except LCDResponseError as e:
            logger.warning("LCDResponseError when querying ledger contract: %s", e)
            raise Unknown(str(e))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteUnavailable(f"Ledger contract unreachable: {e}")

    async def is_available(self) -> bool:
        result = await self._query({"is_available": {}})
        if isinstance(result, dict):
            return bool(result.get("available", result.get("is_available", False)))
        return bool(result)

    async def get_data(self, key: str) -> bytes:
        result = await self._query({"get_data": {"key": key}})
        encoded = result.get("data") if isinstance(result, dict) else result
        if not encoded:
            return b""
        try:
            return base64.b64decode(encoded)
        except ValueError:
            return str(encoded).encode("utf-8")

    async def set_data(self, key: str, value: bytes) -> bool:
        queue = self.tx_queue
        if queue.client is None:
            await queue.initialize()
        msg = MsgExecuteContract(
            sender=queue.wallet_address,
            contract=self.contract,
            msg={"set_data": {"key": key, "value": base64.b64encode(value).decode("ascii")}},
            code_hash=self.code_hash,
            encryption_utils=queue.encryption_utils,
        )
        result = await queue.submit(msg_list=[msg], gas=500000, memo=f"Airdrop ledger update: {key}")
        if not result.success:
            error = result.error or "Ledger write failed"
            if "rejected" in error.lower():
                raise UserDeclined()
            if result.unreachable:
                raise RemoteUnavailable(error)
            raise Unknown(error)
        logger.info(f"Ledger key '{key}' updated, tx: {result.tx_hash}")
        return True
