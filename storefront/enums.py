"""
枚举类型定义模块

定义应用中使用的所有枚举类型。
所有枚举都继承自 str 和 Enum，这样既可以用作字符串，又具有枚举的特性。
"""
from enum import Enum  # 枚举类型，用于定义固定的选项集合


class UserRole(str, Enum):
    """
    用户角色枚举

    - customer: 普通顾客（下单、领券）
    - clerk: 店员（为顾客出具定制方案）
    - admin: 管理员（订单管理、优惠券管理）
    """
    customer = "customer"
    clerk = "clerk"
    admin = "admin"


class ProductStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class ProposalCategory(str, Enum):
    """
    定制方案类别枚举

    - apparel: 服装（支持尺码）
    - accessory: 配饰
    - gear: 装备
    """
    apparel = "apparel"
    accessory = "accessory"
    gear = "gear"


class ProposalStatus(str, Enum):
    """
    定制方案状态枚举

    - proposed: 已发送给顾客，等待下单
    - ordered: 已被顾客下单（单向，只能下单一次）
    """
    proposed = "proposed"
    ordered = "ordered"


class VoucherStatus(str, Enum):
    enabled = "enabled"
    disabled = "disabled"


class ExpirationType(str, Enum):
    """优惠券有效期单位"""
    hours = "hours"
    days = "days"


class OrderStatus(str, Enum):
    """
    订单状态枚举

    顾客端与管理端允许设置的状态集合不同，见
    CUSTOMER_ORDER_STATUSES / ADMIN_ORDER_STATUSES。
    状态之间没有流转约束，任意状态都可以直接改为集合内的其它状态。
    """
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    packaging = "packaging"
    shipped = "shipped"
    on_delivery = "on_delivery"
    delivered = "delivered"
    cancelled = "cancelled"


CUSTOMER_ORDER_STATUSES = frozenset(
    {
        OrderStatus.pending,
        OrderStatus.confirmed,
        OrderStatus.processing,
        OrderStatus.shipped,
        OrderStatus.delivered,
        OrderStatus.cancelled,
    }
)

# 管理端不允许取消订单
ADMIN_ORDER_STATUSES = frozenset(
    {
        OrderStatus.pending,
        OrderStatus.confirmed,
        OrderStatus.processing,
        OrderStatus.packaging,
        OrderStatus.on_delivery,
        OrderStatus.delivered,
    }
)


class PaymentMethod(str, Enum):
    """
    支付方式枚举

    - cod: 货到付款（默认）
    - gcash: GCash 钱包
    - credit_card: 信用卡
    """
    cod = "cod"
    gcash = "gcash"
    credit_card = "credit-card"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class SkipReason(str, Enum):
    """
    下单时被跳过的行项目原因

    单行解析失败不会中断整个订单，原因会在下单响应里返回。
    """
    product_not_found = "product_not_found"
    proposal_not_found = "proposal_not_found"
    proposal_not_owned = "proposal_not_owned"
    proposal_already_ordered = "proposal_already_ordered"
    product_malformed = "product_malformed"
    proposal_malformed = "proposal_malformed"


class VoucherRejectReason(str, Enum):
    """下单时优惠券未被使用的原因（订单照常创建，只是没有折扣）"""
    not_found = "not_found"
    used = "used"
    expired = "expired"
    inactive = "inactive"
    race_lost = "race_lost"
