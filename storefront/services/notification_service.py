"""
实时通知服务

通过 Redis pub/sub 向用户频道 notifications.{user_id} 推送事件，
消息格式：{"event": "...", "data": {...}}

所有推送都在数据库事务提交之后调用。推送失败只记录日志，
不会抛出异常，也不会影响已经提交的业务数据。
"""
import json
import logging
from typing import Any

from storefront.core.config import settings
from storefront.core.redis import get_redis
from storefront.models import CustomProposal, Order, UserVoucher, Voucher

logger = logging.getLogger(__name__)


def user_channel(user_id: int) -> str:
    return f"notifications.{user_id}"


def publish(channel: str, event: str, payload: dict[str, Any]) -> bool:
    """
    发布一条通知

    Returns:
        bool: 是否发布成功（通知关闭或 Redis 不可用时为 False）
    """
    if not settings.NOTIFICATIONS_ENABLED:
        return False
    message = json.dumps({"event": event, "data": payload}, default=str)
    try:
        get_redis().publish(channel, message)
    except Exception:
        logger.exception("Failed to publish %s to %s", event, channel)
        return False
    return True


def notify_order_placed(order: Order) -> bool:
    return publish(
        user_channel(order.user_id),
        "order.placed",
        {
            "order_id": order.id,
            "order_no": order.order_no,
            "total_amount": str(order.total_amount),
            "item_count": len(order.items),
        },
    )


def notify_voucher_received(grant: UserVoucher, voucher: Voucher) -> bool:
    return publish(
        user_channel(grant.user_id),
        "voucher.received",
        {
            "user_voucher_id": grant.id,
            "voucher_code": grant.voucher_code,
            "name": voucher.name,
            "percent": voucher.percent,
            "expires_at": grant.expires_at.isoformat() if grant.expires_at else None,
        },
    )


def notify_proposal_sent(proposal: CustomProposal, message: str | None = None) -> bool:
    return publish(
        user_channel(proposal.customer_id),
        "proposal.sent",
        {
            "proposal_id": proposal.id,
            "name": proposal.name,
            "total_price": str(proposal.total_price),
            "message": message,
        },
    )
