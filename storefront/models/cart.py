"""
购物车模型模块
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlmodel import Field, SQLModel

from .base import utc_now


class CartItem(SQLModel, table=True):
    """
    购物车条目

    引用一个商品或一个定制方案（二选一），带数量和尺码。
    用户下单成功后，该用户的全部购物车条目都会被删除，
    不论这些条目是否出现在本次订单里。
    """
    __tablename__ = "cart_items"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    product_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=True
        ),
    )
    custom_proposal_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("custom_proposals.id", ondelete="CASCADE"),
            index=True,
            nullable=True,
        ),
    )
    quantity: int = Field(default=1)
    size: str | None = Field(default=None, max_length=50)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
