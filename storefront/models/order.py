"""
订单模型模块

定义订单和订单行项目。订单一旦创建，金额字段和行项目都不再修改，
之后只有 status/payment_status 会变化。
"""
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlmodel import Field, Relationship, SQLModel

from storefront.enums import OrderStatus, PaymentMethod, PaymentStatus

from .base import utc_now

if TYPE_CHECKING:
    from .catalog import Product
    from .proposal import CustomProposal
    from .user import User
    from .voucher import Voucher


class Order(SQLModel, table=True):
    """
    订单模型

    金额约束：total_amount == max(0, subtotal + shipping_fee - discount_amount)，
    只在下单时计算一次。

    字段说明：
    - order_no: 订单号（唯一，o_{user_id}_{timestamp}_{random}）
    - subtotal: 行项目小计之和
    - voucher_id/voucher_code/discount_amount: 使用的优惠券（最多一张）
    - customer_*: 下单时的收货人快照，之后不随用户资料变化
    """
    __tablename__ = "orders"
    id: int | None = Field(default=None, primary_key=True)
    order_no: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False)
    )
    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )

    subtotal: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(10, 2), nullable=False)
    )
    shipping_fee: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(10, 2), nullable=False)
    )
    discount_amount: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(10, 2), nullable=False)
    )
    total_amount: Decimal = Field(
        default=Decimal("0.00"), sa_column=Column(Numeric(10, 2), nullable=False)
    )

    voucher_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("vouchers.id", ondelete="SET NULL"), nullable=True
        ),
    )
    voucher_code: str | None = Field(default=None, max_length=64)

    payment_method: PaymentMethod = Field(
        default=PaymentMethod.cod, sa_column=Column(String(16), nullable=False)
    )
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.pending, sa_column=Column(String(16), nullable=False)
    )
    status: OrderStatus = Field(
        default=OrderStatus.pending, sa_column=Column(String(16), nullable=False)
    )

    customer_first_name: str = Field(max_length=128)
    customer_last_name: str = Field(max_length=128)
    customer_email: str = Field(max_length=255)
    customer_phone: str = Field(max_length=64)
    customer_address: str = Field(max_length=1024)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    items: list["OrderItem"] = Relationship(back_populates="order")
    voucher: Optional["Voucher"] = Relationship()
    user: Optional["User"] = Relationship()


class OrderItem(SQLModel, table=True):
    """
    订单行项目

    来源二选一：product_id（普通商品）或 custom_proposal_id（定制方案），
    is_customized 与之对应。price 是实际收取的单价，小计 = price * quantity。
    定制商品的 customization_details 是下单时的方案快照。
    """
    __tablename__ = "order_items"
    id: int | None = Field(default=None, primary_key=True)
    order_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    product_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("products.id", ondelete="SET NULL"), index=True, nullable=True
        ),
    )
    custom_proposal_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("custom_proposals.id", ondelete="SET NULL"),
            index=True,
            nullable=True,
        ),
    )

    name: str = Field(max_length=255)
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    size_price: Decimal | None = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    quantity: int = Field(default=1)
    size: str | None = Field(default=None, max_length=50)
    image: str | None = Field(default=None, max_length=1024)
    is_customized: bool = Field(default=False)
    customization_details: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    order: Optional[Order] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()
    custom_proposal: Optional["CustomProposal"] = Relationship()
