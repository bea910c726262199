# /services/record_store.py
"""
Sole reader/writer of the persisted airdrop record list.

The list lives in the ledger under a single key as a UTF-8 JSON array and is
always replaced as a whole. A sequence number stored beside it lets mutating
callers detect that another writer got in between their read and their write.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

import config
from errors import ParseFailure, StaleWrite
from models import AirdropRecord
from services.ledger import LedgerClient

logger = logging.getLogger(__name__)


@dataclass
class StoreSnapshot:
    """Records together with the ledger version they were read at."""
    records: List[AirdropRecord] = field(default_factory=list)
    version: int = 0


def _decode_payload(raw: bytes) -> Tuple[List[AirdropRecord], bool]:
    """
    Parse persisted bytes into records.

    Returns (records, complete). Entries that fail validation are skipped;
    `complete` is False whenever a non-empty payload was not fully read.
    """
    if not raw:
        return [], True
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.debug(f"Persisted airdrop payload is not UTF-8: {e}")
        return [], False
    if text.strip() == "":
        return [], True
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Could not parse persisted airdrop records: {e}")
        return [], False
    if not isinstance(data, list):
        logger.debug("Persisted airdrop payload is not a JSON array; treating as empty")
        return [], False

    records = []
    complete = True
    for index, item in enumerate(data):
        try:
            records.append(AirdropRecord.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed airdrop record at position {index}: {e}")
            complete = False
    return records, complete


def parse_records(raw: bytes) -> List[AirdropRecord]:
    """Readable records from a persisted payload; malformed parts are dropped, never raised."""
    records, _ = _decode_payload(raw)
    return records


def serialize_records(records: Sequence[AirdropRecord]) -> bytes:
    return json.dumps([record.model_dump() for record in records]).encode("utf-8")


class RecordStore:
    def __init__(self, ledger: LedgerClient, key: str = config.AIRDROP_STORE_KEY):
        self.ledger = ledger
        self.key = key
        self.version_key = f"{key}:version"

    async def is_available(self) -> bool:
        return await self.ledger.is_available()

    async def load(self) -> List[AirdropRecord]:
        raw = await self.ledger.get_data(self.key)
        return parse_records(raw)

    async def snapshot(self) -> StoreSnapshot:
        """
        Read the list for a mutation.

        Raises ParseFailure when the stored payload is not fully readable, so
        a write based on it cannot drop the entries that were skipped.
        """
        version = await self._read_version()
        raw = await self.ledger.get_data(self.key)
        records, complete = _decode_payload(raw)
        if not complete:
            logger.error(f"Refusing to modify '{self.key}': stored payload contains unreadable entries")
            raise ParseFailure("Stored airdrop records are malformed; refusing to overwrite them")
        return StoreSnapshot(records=records, version=version)

    async def persist(self, records: Sequence[AirdropRecord], expected_version: Optional[int] = None) -> int:
        """
        Overwrite the stored list with `records` and return the new version.

        With `expected_version`, the write is refused with StaleWrite when the
        ledger's version no longer matches. The version is bumped before the
        records are written: a failed records write leaves the list intact and
        only invalidates other writers' snapshots.
        """
        current = await self._read_version()
        if expected_version is not None and current != expected_version:
            logger.warning(
                f"Refusing stale write to '{self.key}': read at version {expected_version}, ledger at {current}"
            )
            raise StaleWrite()
        new_version = current + 1
        await self.ledger.set_data(self.version_key, str(new_version).encode("ascii"))
        await self.ledger.set_data(self.key, serialize_records(records))
        logger.info(f"Persisted {len(records)} airdrop records (version {new_version})")
        return new_version

    async def _read_version(self) -> int:
        raw = await self.ledger.get_data(self.version_key)
        try:
            return int(raw.decode("ascii")) if raw else 0
        except (UnicodeDecodeError, ValueError):
            logger.debug(f"Unreadable version under '{self.version_key}'; assuming 0")
            return 0
