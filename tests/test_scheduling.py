import pytest

from pstu_inventory.core import scheduling
from pstu_inventory.models import Block
from pstu_inventory.services.ledger import ledger


@pytest.fixture()
def alerts(monkeypatch, session_factory):
    sent = []
    monkeypatch.setattr(scheduling, "SessionLocal", session_factory)
    monkeypatch.setattr(scheduling, "notify_tamper_alert", lambda blocks: sent.append(list(blocks)) or True)
    return sent


def _append(db, n):
    for i in range(n):
        ledger.append(db, event_type="STOCK_IN", event_id=i + 1, collection_name="StockIn",
                      payload={"quantity": i + 1}, user_id=1)


def test_intact_chain_sends_no_alert(db, alerts):
    _append(db, 2)

    result = scheduling.run_ledger_verification()

    assert result == {"is_valid": True, "tampered_blocks": []}
    assert alerts == []


def test_tampered_block_triggers_alert(db, alerts):
    _append(db, 3)
    db.query(Block).filter(Block.index == 2).update({Block.payload: {"quantity": 500}})
    db.commit()

    result = scheduling.run_ledger_verification()

    assert result["is_valid"] is False
    assert [b["index"] for b in result["tampered_blocks"]] == [2]
    assert alerts == [result["tampered_blocks"]]


def test_scheduler_starts_once(monkeypatch):
    monkeypatch.setattr(scheduling, "_scheduler", None)
    first = scheduling.start_scheduler()
    try:
        assert scheduling.start_scheduler() is first
        assert {job.id for job in first.get_jobs()} == {"ledger_verify_hourly", "ledger_verify_initial"}
    finally:
        scheduling.shutdown_scheduler()
    assert scheduling._scheduler is None


def test_app_lifespan_runs_the_scheduler(monkeypatch):
    from fastapi.testclient import TestClient

    from pstu_inventory.core.config import settings
    from pstu_inventory.main import app

    monkeypatch.setattr(scheduling, "_scheduler", None)
    monkeypatch.setattr(settings, "LEDGER_VERIFY_ENABLED", True)

    with TestClient(app):
        assert scheduling._scheduler is not None
    assert scheduling._scheduler is None
