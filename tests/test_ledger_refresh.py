import asyncio

from models import AirdropRecord
from scheduled_tasks.ledger_refresh import refresh_records_job
from services.codec import encode


def test_refresh_job_reloads_records(controller, store):
    asyncio.run(store.persist([
        AirdropRecord(id=1, encryptedAmount=encode(10), eligibility=True, timestamp=0),
        AirdropRecord(id=2, encryptedAmount=encode(0), eligibility=False, timestamp=0),
    ]))

    assert asyncio.run(refresh_records_job(controller)) == 2
    assert [r.id for r in controller.records] == [1, 2]


def test_refresh_job_survives_unavailable_ledger(controller, ledger, capsys):
    ledger.available = False

    assert asyncio.run(refresh_records_job(controller)) is None
    assert "Ledger refresh failed (remote_unavailable)" in capsys.readouterr().out
