"""
下单服务

一次下单在一个数据库事务里完成：
1. 插入订单占位记录（flush 拿到订单 ID），统计用户购物车条目数
2. 逐行解析请求中的行项目（普通商品或定制方案），累加小计
3. 核销优惠券（可选，最多一张），计算折扣
4. 写入订单金额：total = max(0, subtotal + shipping_fee - discount)
5. 清空用户的全部购物车条目
6. 提交

任一步骤出错都会整体回滚，并返回 500301。
单行解析失败（商品不存在、方案不属于当前用户、存储数据损坏等）不会中断下单，
该行被跳过，原因记录在 PlacementResult.skipped_items。
优惠券不可用时订单照常创建，只是没有折扣。

提交成功后才推送 order.placed 通知，推送失败不影响订单。
"""
import logging
import secrets
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlmodel import Session

from storefront import crud
from storefront.api.errors import order_placement_failed
from storefront.api.schemas import OrderCreateRequest, OrderItemRequest, SkippedItem
from storefront.core.config import settings
from storefront.enums import (
    OrderStatus,
    PaymentStatus,
    ProposalCategory,
    ProposalStatus,
    SkipReason,
    VoucherRejectReason,
)
from storefront.models import (
    MalformedColumnError,
    Order,
    OrderItem,
    Product,
    User,
    UserVoucher,
    Voucher,
    utc_now,
)
from storefront.services import notification_service

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value: Any) -> Decimal:
    """转换为两位小数的金额（四舍五入）"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _stored_price(value: Any) -> Decimal | None:
    """读取商品 prices 列中的尺码价格，无法转换为金额时返回 None"""
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            return None
        return _money(amount)
    except InvalidOperation:
        return None


@dataclass
class PlacementResult:
    order: Order
    cart_cleared: int
    initial_cart_count: int
    skipped_items: list[SkippedItem] = field(default_factory=list)
    voucher_rejected_reason: VoucherRejectReason | None = None


def resolve_product_price(
    product: Product,
    *,
    size: str | None,
    requested_price: Decimal | None = None,
    requested_size_price: Decimal | None = None,
) -> tuple[Decimal, Decimal | None]:
    """
    计算普通商品的成交单价和尺码价格

    规则（按顺序）：
    1. 默认使用商品基础价格
    2. available_sizes 与 prices 等长且找到请求的尺码时，使用该尺码的价格，
       同时作为 size_price；该价格不是合法金额时忽略，保持基础价格
    3. 请求中的 price / size_price 为正数时覆盖对应的值
    4. 单价不为正数时退回基础价格
    5. 请求了尺码但 size_price 仍为空时，size_price 等于单价

    Returns:
        (单价, 尺码价格)
    """
    base_price = _money(product.price or 0)
    price = base_price
    size_price: Decimal | None = None

    sizes = product.available_sizes or []
    prices = product.prices or []
    if size and sizes and prices and len(sizes) == len(prices) and size in sizes:
        stored = _stored_price(prices[sizes.index(size)])
        if stored is None:
            logger.warning("Product %s has an invalid price for size %s", product.id, size)
        else:
            size_price = stored
            price = stored

    if requested_price is not None and requested_price > 0:
        price = _money(requested_price)
    if requested_size_price is not None and requested_size_price > 0:
        size_price = _money(requested_size_price)

    if price <= 0:
        price = base_price
    if size and size_price is None:
        size_price = price
    return price, size_price


def _product_line(
    session: Session, *, order: Order, item: OrderItemRequest
) -> OrderItem | SkipReason:
    try:
        product = crud.get_product(session=session, product_id=item.product_id)
    except MalformedColumnError:
        logger.warning("Product %s has malformed stored data", item.product_id, exc_info=True)
        return SkipReason.product_malformed
    if not product:
        logger.warning("Product not found: %s", item.product_id)
        return SkipReason.product_not_found

    price, size_price = resolve_product_price(
        product,
        size=item.size,
        requested_price=item.price,
        requested_size_price=item.size_price,
    )
    logger.info(
        "Regular product order item: %s (qty=%s, price=%s)", product.name, item.quantity, price
    )
    return OrderItem(
        order_id=order.id,
        product_id=product.id,
        name=product.name,
        price=price,
        size_price=size_price,
        quantity=item.quantity,
        size=item.size,
        image=product.image,
        is_customized=False,
    )


def _proposal_line(
    session: Session, *, order: Order, user_id: int, item: OrderItemRequest
) -> OrderItem | SkipReason:
    try:
        proposal = crud.get_proposal(
            session=session, proposal_id=item.custom_proposal_id, for_update=True
        )
    except MalformedColumnError:
        logger.warning(
            "Custom proposal %s has malformed stored data", item.custom_proposal_id, exc_info=True
        )
        return SkipReason.proposal_malformed
    if not proposal:
        logger.warning("Custom proposal not found: %s", item.custom_proposal_id)
        return SkipReason.proposal_not_found
    if proposal.customer_id != user_id:
        logger.warning(
            "User %s attempted to order custom proposal %s addressed to another customer",
            user_id,
            proposal.id,
        )
        return SkipReason.proposal_not_owned
    if proposal.status == ProposalStatus.ordered:
        logger.warning(
            "Custom proposal %s was already ordered (order %s)", proposal.id, proposal.order_id
        )
        return SkipReason.proposal_already_ordered

    if item.price is not None and item.price > 0:
        price = _money(item.price)
    else:
        price = _money(proposal.total_price or 0)

    # 历史数据里可能有枚举之外的类别，按原值写入快照
    category = getattr(proposal.category, "value", proposal.category)
    size_price = price if category == ProposalCategory.apparel.value and item.size else None

    line = OrderItem(
        order_id=order.id,
        custom_proposal_id=proposal.id,
        name=proposal.name,
        price=price,
        size_price=size_price,
        quantity=item.quantity,
        size=item.size,
        image=proposal.images[0] if proposal.images else None,
        is_customized=True,
        customization_details={
            "customization_request": proposal.customization_request,
            "designer_message": proposal.designer_message,
            "material": proposal.material,
            "features": list(proposal.features or []),
            "category": category,
        },
    )

    # 方案只能下单一次
    proposal.status = ProposalStatus.ordered
    proposal.order_id = order.id
    proposal.updated_at = utc_now()
    session.add(proposal)

    logger.info(
        "Custom proposal order item: %s (category=%s, qty=%s, price=%s)",
        proposal.name,
        category,
        item.quantity,
        price,
    )
    return line


def _redeem_voucher(
    session: Session, *, user_id: int, user_voucher_id: int, subtotal: Decimal
) -> tuple[UserVoucher | None, Voucher | None, Decimal, VoucherRejectReason | None]:
    """
    核销用户优惠券

    Returns:
        (用户优惠券, 模板, 折扣金额, 拒绝原因)；拒绝时前三项为 None/None/0
    """
    grant = crud.get_user_voucher(
        session=session, user_voucher_id=user_voucher_id, user_id=user_id, for_update=True
    )
    if not grant:
        logger.warning("Voucher not found: %s for user %s", user_voucher_id, user_id)
        return None, None, ZERO, VoucherRejectReason.not_found
    if grant.is_used():
        logger.warning("Voucher %s is already used", user_voucher_id)
        return None, None, ZERO, VoucherRejectReason.used
    if grant.is_expired():
        logger.warning("Voucher %s is expired", user_voucher_id)
        return None, None, ZERO, VoucherRejectReason.expired

    voucher = session.get(Voucher, grant.voucher_id)
    if not voucher:
        logger.warning("Voucher template %s not found", grant.voucher_id)
        return None, None, ZERO, VoucherRejectReason.not_found
    if not voucher.is_active:
        logger.warning("Voucher template %s is disabled", voucher.id)
        return None, None, ZERO, VoucherRejectReason.inactive

    discount = _money(subtotal * Decimal(voucher.percent) / Decimal(100))
    if not crud.mark_used(session=session, user_voucher=grant):
        logger.warning("Voucher %s was redeemed by a concurrent order", user_voucher_id)
        return None, None, ZERO, VoucherRejectReason.race_lost

    logger.info(
        "Voucher applied: %s (%s%% discount: %s)", grant.voucher_code, voucher.percent, discount
    )
    return grant, voucher, discount, None


def _new_order_no(user_id: int) -> str:
    # 订单号格式：o_{user_id}_{timestamp}_{random}
    return f"o_{user_id}_{int(time.time())}_{secrets.token_hex(6)}"


def place_order(*, session: Session, user: User, request: OrderCreateRequest) -> PlacementResult:
    """
    下单

    Args:
        session: 数据库会话（本函数负责提交或回滚）
        user: 下单用户
        request: 已通过校验的下单请求

    Returns:
        PlacementResult: 订单（已加载行项目和优惠券）、购物车清理数量、
        下单前购物车数量、被跳过的行项目、优惠券拒绝原因

    Raises:
        AppError: 500301，事务已整体回滚
    """
    user_id = user.id
    shipping_fee = _money(
        request.shipping_fee if request.shipping_fee is not None else settings.DEFAULT_SHIPPING_FEE
    )
    skipped: list[SkippedItem] = []
    rejected: VoucherRejectReason | None = None

    try:
        order = Order(
            order_no=_new_order_no(user_id),
            user_id=user_id,
            payment_method=request.payment_method,
            payment_status=PaymentStatus.pending,
            status=OrderStatus.pending,
            customer_first_name=request.customer_first_name,
            customer_last_name=request.customer_last_name,
            customer_email=str(request.customer_email),
            customer_phone=request.customer_phone,
            customer_address=request.customer_address,
        )
        session.add(order)
        session.flush()
        order_id = order.id

        initial_cart_count = crud.count_cart_items(session=session, user_id=user_id)
        logger.info("User %s placing order with %s cart items", user_id, initial_cart_count)

        subtotal = ZERO
        for index, item in enumerate(request.items):
            if item.custom_proposal_id is not None:
                line = _proposal_line(session, order=order, user_id=user_id, item=item)
            else:
                line = _product_line(session, order=order, item=item)
            if isinstance(line, SkipReason):
                skipped.append(
                    SkippedItem(
                        index=index,
                        product_id=item.product_id,
                        custom_proposal_id=item.custom_proposal_id,
                        reason=line,
                    )
                )
                continue
            session.add(line)
            subtotal += line.price * line.quantity
        subtotal = _money(subtotal)

        discount = ZERO
        if request.user_voucher_id is not None:
            grant, voucher, discount, rejected = _redeem_voucher(
                session, user_id=user_id, user_voucher_id=request.user_voucher_id, subtotal=subtotal
            )
            if grant and voucher:
                order.voucher_id = voucher.id
                order.voucher_code = grant.voucher_code

        order.subtotal = subtotal
        order.shipping_fee = shipping_fee
        order.discount_amount = discount
        order.total_amount = max(ZERO, _money(subtotal + shipping_fee - discount))
        session.add(order)

        cart_cleared = crud.clear_cart(session=session, user_id=user_id)
        logger.info(
            "Cart cleared for user %s: %s items deleted (was %s)",
            user_id,
            cart_cleared,
            initial_cart_count,
        )
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception("Order placement failed for user %s", user_id)
        raise order_placement_failed() from exc

    placed = crud.get_order(session=session, order_id=order_id, user_id=user_id)
    logger.info(
        "Order %s placed for user %s: total=%s, skipped=%s",
        placed.order_no,
        user_id,
        placed.total_amount,
        len(skipped),
    )
    notification_service.notify_order_placed(placed)
    return PlacementResult(
        order=placed,
        cart_cleared=cart_cleared,
        initial_cart_count=initial_cart_count,
        skipped_items=skipped,
        voucher_rejected_reason=rejected,
    )
