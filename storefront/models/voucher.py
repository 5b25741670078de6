"""
优惠券模型模块

Voucher 是可复用的优惠券模板（折扣比例、有效期规则），
UserVoucher 是模板发放给某个用户的一张券（单次使用，独立计算有效期）。
"""
from datetime import datetime, timedelta

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlmodel import Field, SQLModel

from storefront.enums import ExpirationType, VoucherStatus

from .base import ensure_utc, utc_now


class Voucher(SQLModel, table=True):
    """
    优惠券模板

    停用模板会阻止后续核销，但不会影响已经用掉的券。

    字段说明：
    - percent: 折扣比例（1-100）
    - status: enabled/disabled
    - expiration_type + expiration_duration: 发券后多少小时/天过期
    """
    __tablename__ = "vouchers"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    percent: int = Field(nullable=False)
    image: str | None = Field(default=None, max_length=1024)
    status: VoucherStatus = Field(
        default=VoucherStatus.enabled, sa_column=Column(String(16), nullable=False)
    )
    expiration_type: ExpirationType = Field(
        default=ExpirationType.days, sa_column=Column(String(8), nullable=False)
    )
    expiration_duration: int = Field(default=7)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    @property
    def is_active(self) -> bool:
        return self.status == VoucherStatus.enabled

    def expiry_from(self, sent_at: datetime) -> datetime:
        """根据模板的有效期规则，计算从 sent_at 开始的过期时间"""
        duration = int(self.expiration_duration)
        if self.expiration_type == ExpirationType.hours:
            return sent_at + timedelta(hours=duration)
        return sent_at + timedelta(days=duration)


class UserVoucher(SQLModel, table=True):
    """
    用户优惠券（一次发放）

    有效条件：未使用 AND（无过期时间 OR 当前时间 <= 过期时间）AND 模板已启用。
    used_at 一旦写入就不会被清除。

    字段说明：
    - voucher_code: 券码（每次发放唯一）
    - sent_at: 发放时间
    - used_at: 使用时间（NULL 表示未使用）
    - expires_at: 过期时间（发放时计算；旧数据由补录任务填充）
    """
    __tablename__ = "user_vouchers"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    voucher_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("vouchers.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    voucher_code: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False)
    )
    sent_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    used_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    expires_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        expires_at = ensure_utc(self.expires_at)
        if expires_at is None:
            return False
        return (now or utc_now()) > expires_at
