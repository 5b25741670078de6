"""
定时任务逻辑
"""

import logging
from uuid import uuid4

from sqlmodel import Session

from storefront import crud
from storefront.core.db import engine
from storefront.core.redis import acquire_lock, release_lock

logger = logging.getLogger(__name__)

BACKFILL_LOCK_KEY = "vouchers:expiry_backfill:lock"
BACKFILL_LOCK_TTL_SECONDS = 60 * 10


def backfill_voucher_expiry(db_engine=engine) -> int:
    """
    为缺少过期时间的旧用户优惠券补录 expires_at

    新发放的券在发放时就写入了过期时间，这个任务只处理历史数据。
    重复执行是安全的。

    Returns:
        本次补录的数量（未拿到锁时为 0）
    """
    lock_value = str(uuid4())
    if not acquire_lock(BACKFILL_LOCK_KEY, lock_value, expire_seconds=BACKFILL_LOCK_TTL_SECONDS):
        logger.info("Voucher expiry backfill already running, skip this run.")
        return 0

    try:
        with Session(db_engine) as session:
            filled = crud.backfill_voucher_expiry(session=session)
        logger.info("Voucher expiry backfill finished: %d grants updated", filled)
        return filled
    finally:
        release_lock(BACKFILL_LOCK_KEY, lock_value)
