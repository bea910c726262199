import asyncio
import json

import pytest

from errors import OperationInProgress, ParseFailure, RemoteUnavailable, StaleWrite
from models import AirdropRecord
from services.codec import decode, encode
from services.controller import AirdropController
from services.ledger import MemoryLedger
from services.record_store import RecordStore

from conftest import FixedOracle


class GatedLedger(MemoryLedger):
    """Memory ledger whose reads wait until the gate opens."""

    def __init__(self):
        super().__init__()
        self.gate = None

    async def get_data(self, key):
        if self.gate is not None:
            await self.gate.wait()
        return await super().get_data(key)


def test_refresh_loads_records_and_logs_contract_check(controller, store):
    record = AirdropRecord(id=1, encryptedAmount=encode(5), eligibility=True, timestamp=0)
    asyncio.run(store.persist([record]))

    assert asyncio.run(controller.refresh()) == [record]
    assert controller.get_record(1) == record
    latest = controller.history_entries()[0]
    assert (latest.action, latest.details) == ("Contract Check", "Contract availability verified")


def test_refresh_fails_when_ledger_unavailable(controller, ledger):
    ledger.available = False
    with pytest.raises(RemoteUnavailable):
        asyncio.run(controller.refresh())
    assert controller.history_entries() == []


def test_unreachable_ledger_fails_check_and_stays_retryable(controller, ledger, identity):
    ledger.available = False
    with pytest.raises(RemoteUnavailable):
        asyncio.run(controller.check_eligibility(identity))
    assert not controller.is_busy("checking")

    ledger.available = True
    assert asyncio.run(controller.check_eligibility(identity)).record.id == 1


def test_concurrent_check_is_rejected_while_busy(challenge, identity):
    ledger = GatedLedger()
    controller = AirdropController(store=RecordStore(ledger), oracle=FixedOracle(), challenge=challenge)

    async def scenario():
        ledger.gate = asyncio.Event()
        first = asyncio.create_task(controller.check_eligibility(identity))
        await asyncio.sleep(0)
        assert controller.is_busy("checking")
        with pytest.raises(OperationInProgress):
            await controller.check_eligibility(identity)
        ledger.gate.set()
        return await first

    result = asyncio.run(scenario())
    assert result.record.id == 1
    assert not controller.is_busy("checking")


def test_writer_from_other_instance_causes_stale_write(challenge, identity):
    ledger = MemoryLedger()
    ours = AirdropController(store=RecordStore(ledger), oracle=FixedOracle(), challenge=challenge)
    theirs = RecordStore(ledger)

    async def scenario():
        # another writer lands between our snapshot and our write
        original_persist = ours.store.persist

        async def persist_after_other_writer(records, expected_version=None):
            await theirs.persist([], expected_version=None)
            return await original_persist(records, expected_version=expected_version)

        ours.store.persist = persist_after_other_writer
        await ours.check_eligibility(identity)

    with pytest.raises(StaleWrite):
        asyncio.run(scenario())
    assert ours.records == []


def test_find_record_reloads_on_cache_miss(controller, store):
    record = AirdropRecord(id=4, encryptedAmount=encode(9), eligibility=True, timestamp=0)
    asyncio.run(store.persist([record]))

    assert asyncio.run(controller.find_record(4)) == record


def _seed(ledger, *entries):
    ledger.data["airdrops"] = json.dumps(list(entries)).encode("utf-8")


def _stored_ids(ledger):
    return [entry["id"] for entry in json.loads(ledger.data["airdrops"].decode("utf-8"))]


def test_check_keeps_legacy_records_when_appending(controller, ledger, identity):
    _seed(
        ledger,
        {"id": 1, "encryptedAmount": encode(500), "eligibility": True, "timestamp": 1, "claimed": False},
        {"id": 2, "encryptedAmount": encode(300), "eligibility": True, "timestamp": 2, "claimed": True},
        {"id": 3, "encryptedAmount": 250, "eligibility": True, "timestamp": 3, "claimed": False},
    )

    result = asyncio.run(controller.check_eligibility(identity))

    assert result.record.id == 4
    assert _stored_ids(ledger) == [1, 2, 3, 4]
    assert controller.get_record(2).claimed is True
    assert decode(controller.get_record(3).encryptedAmount) == 250


def test_mutations_refuse_to_overwrite_malformed_entries(controller, ledger, identity):
    _seed(
        ledger,
        {"id": 1, "encryptedAmount": encode(500), "eligibility": True, "timestamp": 1, "claimed": False},
        {"id": 0, "encryptedAmount": encode(9), "eligibility": True, "timestamp": 2},
        {"id": 2, "encryptedAmount": encode(300), "eligibility": True, "timestamp": 3, "claimed": False},
    )
    raw = ledger.data["airdrops"]

    assert [r.id for r in asyncio.run(controller.refresh())] == [1, 2]
    with pytest.raises(ParseFailure):
        asyncio.run(controller.check_eligibility(identity))
    with pytest.raises(ParseFailure):
        asyncio.run(controller.claim(controller.get_record(1), identity))

    assert ledger.data["airdrops"] == raw
    assert not controller.is_busy("checking")
    assert not controller.is_busy("claiming")


class DroppingLedger(MemoryLedger):
    """Memory ledger that fails the next write of the record list."""

    def __init__(self):
        super().__init__()
        self.drop_next = False

    async def set_data(self, key, value):
        if key == "airdrops" and self.drop_next:
            self.drop_next = False
            raise RemoteUnavailable("Ledger dropped the write")
        return await super().set_data(key, value)


def test_failed_claim_write_changes_nothing(challenge, identity):
    ledger = DroppingLedger()
    controller = AirdropController(store=RecordStore(ledger), oracle=FixedOracle(), challenge=challenge)
    record = asyncio.run(controller.check_eligibility(identity)).record
    history_before = controller.history_entries()

    ledger.drop_next = True
    with pytest.raises(RemoteUnavailable):
        asyncio.run(controller.claim(record, identity))

    assert controller.get_record(record.id).claimed is False
    assert controller.history_entries() == history_before
    assert asyncio.run(controller.store.load())[0].claimed is False

    claimed = asyncio.run(controller.claim(record, identity))
    assert claimed.claimed is True
