"""
定时任务调度器
"""

import logging
from datetime import timezone

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from storefront.core.config import settings
from storefront.worker.tasks import backfill_voucher_expiry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    scheduler = BlockingScheduler(timezone=timezone.utc)
    scheduler.add_job(
        backfill_voucher_expiry,
        IntervalTrigger(minutes=settings.VOUCHER_BACKFILL_INTERVAL_MINUTES),
        id="voucher_expiry_backfill",
        replace_existing=True,
    )
    logger.info(
        "Scheduler started. Voucher expiry backfill runs every %d minutes.",
        settings.VOUCHER_BACKFILL_INTERVAL_MINUTES,
    )
    scheduler.start()


if __name__ == "__main__":
    main()
