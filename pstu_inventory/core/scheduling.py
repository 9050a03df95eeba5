# pstu_inventory/core/scheduling.py
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from pstu_inventory.core.config import settings
from pstu_inventory.db.session import SessionLocal
from pstu_inventory.services.ledger import ledger
from pstu_inventory.services.notifications import notify_tamper_alert

logger = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None


def run_ledger_verification() -> Dict[str, Any]:
    """
    One verification pass over the whole ledger; alerts by e-mail when
    anything fails. Runs on the scheduler thread with its own session.
    """
    logger.info("Running ledger verification...")
    db = SessionLocal()
    try:
        result = ledger.verify_chain(db)
    finally:
        db.close()

    if result["is_valid"]:
        logger.info("Ledger verified - all blocks intact")
    else:
        logger.error("LEDGER TAMPERING DETECTED: %s", result["tampered_blocks"])
        notify_tamper_alert(result["tampered_blocks"])
    return result


def start_scheduler() -> Optional[BackgroundScheduler]:
    global _scheduler
    if _scheduler is not None:
        logger.info("Ledger verification job already running")
        return _scheduler

    sched = BackgroundScheduler(timezone="UTC")
    sched.add_job(
        run_ledger_verification,
        CronTrigger(minute=settings.LEDGER_VERIFY_CRON_MINUTE),
        id="ledger_verify_hourly",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    sched.add_job(
        run_ledger_verification,
        DateTrigger(run_date=datetime.utcnow() + timedelta(
            seconds=settings.LEDGER_INITIAL_VERIFY_DELAY_SECONDS),
                    timezone="UTC"),
        id="ledger_verify_initial",
        replace_existing=True,
    )
    sched.start()
    _scheduler = sched
    logger.info("Ledger verification job started (runs every hour)")
    return sched


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
