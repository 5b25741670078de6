"""
用户模型模块

定义用户相关的数据库模型。
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlmodel import Field, SQLModel

from storefront.enums import UserRole

from .base import utc_now


class User(SQLModel, table=True):
    """
    用户模型

    顾客、店员、管理员共用一张表，通过 role 区分。
    登录与令牌签发在外部完成，这里只存储身份信息。

    字段说明：
    - id: 主键（自增）
    - email: 邮箱（唯一）
    - full_name: 姓名
    - role: 角色（customer/clerk/admin）
    - is_active: 是否启用，停用的用户令牌会被拒绝
    """
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False)
    )
    full_name: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(
        default=UserRole.customer, sa_column=Column(String(16), nullable=False)
    )
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
