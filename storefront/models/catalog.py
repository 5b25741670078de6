"""
商品目录模型模块

定义分类和商品。订单引擎只读这两张表，用来给行项目定价。
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlmodel import Field, SQLModel

from storefront.enums import ProductStatus

from .base import utc_now
from .types import VersionedList


class Category(SQLModel, table=True):
    __tablename__ = "categories"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=128)
    kind: str | None = Field(default=None, max_length=32)  # apparel/accessory/gear
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Product(SQLModel, table=True):
    """
    商品模型

    尺码定价：available_sizes 与 prices 是两个等长的并列数组，
    available_sizes[i] 的价格是 prices[i]。长度不一致时视为没有尺码定价，
    一律使用基础价格 price。

    字段说明：
    - price: 基础价格
    - status: 上架状态（active/inactive）
    - image: 主图路径
    - images/features/available_sizes/prices: 带版本号的列表列（见 types.VersionedList）
    """
    __tablename__ = "products"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    category_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True, nullable=True
        ),
    )
    status: ProductStatus = Field(
        default=ProductStatus.active, sa_column=Column(String(16), nullable=False)
    )

    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )
    material: str | None = Field(default=None, max_length=255)
    image: str | None = Field(default=None, max_length=1024)

    images: list[str] = Field(default_factory=list, sa_column=Column(VersionedList()))
    features: list[str] = Field(default_factory=list, sa_column=Column(VersionedList()))
    available_sizes: list[str] = Field(
        default_factory=list, sa_column=Column(VersionedList())
    )
    prices: list[float] = Field(default_factory=list, sa_column=Column(VersionedList()))

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
