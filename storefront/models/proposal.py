"""
定制方案模型模块

店员为某位顾客出具的定制商品报价。顾客可以像普通商品一样把它放进购物车下单。
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlmodel import Field, SQLModel

from storefront.enums import ProposalCategory, ProposalStatus

from .base import utc_now
from .types import VersionedList


class CustomProposal(SQLModel, table=True):
    """
    定制方案模型

    生命周期：店员创建（proposed）→ 顾客下单 → ordered，并记录 order_id。
    只能被下单一次。订单行项目会保存一份方案快照，之后修改方案不会影响历史订单。

    字段说明：
    - user_id: 出具方案的店员
    - customer_id: 方案的接收顾客，只有该顾客可以下单
    - category: 类别（apparel/accessory/gear），apparel 支持尺码
    - total_price: 报价（单价）
    - images/features/size_options: 带版本号的列表列
    """
    __tablename__ = "custom_proposals"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    customer_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )

    name: str = Field(max_length=255)
    category: ProposalCategory = Field(sa_column=Column(String(16), nullable=False))
    product_type: str | None = Field(default=None, max_length=255)
    customization_request: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    designer_message: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    material: str | None = Field(default=None, max_length=255)
    customer_name: str | None = Field(default=None, max_length=255)
    customer_email: str | None = Field(default=None, max_length=255)
    quantity: int | None = Field(default=None)
    total_price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )

    features: list[str] = Field(default_factory=list, sa_column=Column(VersionedList()))
    images: list[str] = Field(default_factory=list, sa_column=Column(VersionedList()))
    size_options: list[str] = Field(default_factory=list, sa_column=Column(VersionedList()))

    status: ProposalStatus = Field(
        default=ProposalStatus.proposed, sa_column=Column(String(16), nullable=False)
    )
    order_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("orders.id", ondelete="SET NULL"), index=True, nullable=True
        ),
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
