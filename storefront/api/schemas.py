"""
API 请求/响应数据模型（Schema）

定义所有 API 接口的请求和响应数据结构。
使用 Pydantic 进行数据验证和序列化。

关键概念：
- BaseModel: Pydantic 的模型基类，用于数据验证
- Field: 字段验证器，定义字段的约束（长度、范围等）
- 这些模型不是数据库表，只用于 API 数据交换
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal  # 精确数值类型，用于金额
from typing import Annotated, Any  # 任意类型

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from storefront.enums import (
    ADMIN_ORDER_STATUSES,
    CUSTOMER_ORDER_STATUSES,
    ExpirationType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProposalCategory,
    ProposalStatus,
    SkipReason,
    UserRole,
    VoucherRejectReason,
    VoucherStatus,
)

# 去除首尾空白后不能为空
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# ============================================================
# 通用响应模型
# ============================================================


class TokenPayload(BaseModel):
    """
    JWT Token 载荷模型

    sub (subject) 存储用户 ID。
    """
    sub: str | None = None


class ApiEnvelope(BaseModel):
    """
    API 统一响应格式

    - code: 状态码（0 表示成功，非 0 表示错误）
    - message: 消息（成功时为 "success"，错误时为错误描述）
    - data: 数据（成功时返回业务数据，错误时为 None）

    示例响应：
        {"code": 0, "message": "success", "data": {...}}
        {"code": 404201, "message": "Order not found", "data": None}
    """
    code: int = 0
    message: str = "success"
    data: Any | None = None


class UserSummary(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    role: UserRole


# ============================================================
# 商品目录
# ============================================================


class ProductPublic(BaseModel):
    id: int
    name: str
    description: str | None = None
    category_id: int | None = None
    price: Decimal
    material: str | None = None
    image: str | None = None
    images: list[str] = []
    features: list[str] = []
    available_sizes: list[str] = []
    prices: list[Decimal] = []


class ProductsData(BaseModel):
    data: list[ProductPublic]
    count: int


class ProductSummary(BaseModel):
    """订单详情里附带的商品当前信息"""
    id: int
    name: str
    price: Decimal
    image: str | None = None


# ============================================================
# 定制方案
# ============================================================


class ProposalCreateRequest(BaseModel):
    """
    创建定制方案请求模型

    店员为 customer_id 指定的顾客出具方案。
    """
    customer_id: int
    name: NonBlankStr = Field(max_length=255)
    category: ProposalCategory
    product_type: str | None = Field(default=None, max_length=255)
    customization_request: str | None = None
    designer_message: str | None = None
    material: str | None = Field(default=None, max_length=255)
    customer_name: str | None = Field(default=None, max_length=255)
    customer_email: EmailStr | None = None
    quantity: int | None = Field(default=None, ge=1)
    total_price: Decimal = Field(default=Decimal("0.00"), ge=0)
    features: list[str] = []
    images: list[str] = []
    size_options: list[str] = []
    message: str | None = None  # 随方案一起推送给顾客的附言


class ProposalPublic(BaseModel):
    id: int
    user_id: int
    customer_id: int
    name: str
    category: ProposalCategory
    product_type: str | None = None
    customization_request: str | None = None
    designer_message: str | None = None
    material: str | None = None
    quantity: int | None = None
    total_price: Decimal
    features: list[str] = []
    images: list[str] = []
    size_options: list[str] = []
    status: ProposalStatus
    order_id: int | None = None
    created_at: datetime


class ProposalsData(BaseModel):
    data: list[ProposalPublic]
    count: int


class ProposalSummary(BaseModel):
    """订单详情里附带的定制方案当前信息"""
    id: int
    name: str
    category: ProposalCategory
    material: str | None = None
    customization_request: str | None = None
    images: list[str] = []
    total_price: Decimal


# ============================================================
# 购物车
# ============================================================


class CartItemCreateRequest(BaseModel):
    """加入购物车：product_id 与 custom_proposal_id 二选一"""
    product_id: int | None = None
    custom_proposal_id: int | None = None
    quantity: int = Field(default=1, ge=1, le=1000)
    size: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def _exactly_one_source(self) -> Self:
        if (self.product_id is None) == (self.custom_proposal_id is None):
            raise ValueError("Exactly one of product_id or custom_proposal_id is required")
        return self


class CartItemPublic(BaseModel):
    id: int
    product_id: int | None = None
    custom_proposal_id: int | None = None
    quantity: int
    size: str | None = None
    created_at: datetime


class CartData(BaseModel):
    data: list[CartItemPublic]
    count: int


class CartCountData(BaseModel):
    cart_count: int


class CartClearedData(BaseModel):
    deleted_count: int


# ============================================================
# 优惠券
# ============================================================


class VoucherCreateRequest(BaseModel):
    name: NonBlankStr = Field(max_length=255)
    description: str | None = None
    percent: int = Field(ge=1, le=100)
    image: str | None = Field(default=None, max_length=1024)
    expiration_type: ExpirationType
    expiration_duration: int = Field(ge=1)


class VoucherPublic(BaseModel):
    id: int
    name: str
    description: str | None = None
    percent: int
    image: str | None = None
    status: VoucherStatus
    expiration_type: ExpirationType
    expiration_duration: int


class VoucherSendRequest(BaseModel):
    customer_id: int


class UserVoucherPublic(BaseModel):
    """
    用户优惠券

    id 是用户优惠券（发放记录）的 ID，下单时作为 user_voucher_id 提交，
    不是模板 ID。
    """
    id: int
    voucher_id: int
    voucher_code: str
    name: str
    description: str | None = None
    percent: int
    image: str | None = None
    status: VoucherStatus
    sent_at: datetime
    expires_at: datetime | None = None
    is_expired: bool


class UserVouchersData(BaseModel):
    data: list[UserVoucherPublic]
    count: int


class VoucherValidateRequest(BaseModel):
    user_voucher_id: int


class VoucherValidateData(BaseModel):
    valid: bool = True
    user_voucher_id: int
    voucher_id: int
    name: str
    percent: int
    voucher_code: str


class VoucherSummary(BaseModel):
    id: int
    name: str
    percent: int


# ============================================================
# 订单
# ============================================================


class OrderItemRequest(BaseModel):
    """
    下单行项目

    product_id 与 custom_proposal_id 必须且只能提供一个。
    is_customized 不传时按来源推断；传了就必须和来源一致。
    price/size_price 只在为正数时覆盖服务端计算的价格。
    """
    product_id: int | None = None
    custom_proposal_id: int | None = None
    quantity: int = Field(ge=1, le=100000)
    size: str | None = Field(default=None, max_length=50)
    price: Decimal | None = None
    size_price: Decimal | None = None
    is_customized: bool | None = None

    @model_validator(mode="after")
    def _check_source(self) -> Self:
        has_proposal = self.custom_proposal_id is not None
        if (self.product_id is not None) == has_proposal:
            raise ValueError("Exactly one of product_id or custom_proposal_id is required")
        if self.is_customized is None:
            self.is_customized = has_proposal
        elif self.is_customized != has_proposal:
            raise ValueError("is_customized must be true only for custom_proposal_id items")
        return self


class OrderCreateRequest(BaseModel):
    """
    创建订单请求模型

    收货人信息必须全部提供，保存为订单快照。
    """
    items: list[OrderItemRequest] = Field(min_length=1)
    user_voucher_id: int | None = None
    shipping_fee: Decimal | None = Field(default=None, ge=0)
    payment_method: PaymentMethod = PaymentMethod.cod
    customer_first_name: NonBlankStr = Field(max_length=128)
    customer_last_name: NonBlankStr = Field(max_length=128)
    customer_email: EmailStr
    customer_phone: NonBlankStr = Field(max_length=64)
    customer_address: NonBlankStr = Field(max_length=1024)


class OrderStatusUpdateRequest(BaseModel):
    """顾客端修改订单状态"""
    status: OrderStatus

    @field_validator("status")
    @classmethod
    def _allowed(cls, v: OrderStatus) -> OrderStatus:
        if v not in CUSTOMER_ORDER_STATUSES:
            raise ValueError(f"Status {v.value} is not allowed")
        return v


class AdminOrderStatusUpdateRequest(BaseModel):
    """管理端修改订单状态（不允许 cancelled）"""
    status: OrderStatus

    @field_validator("status")
    @classmethod
    def _allowed(cls, v: OrderStatus) -> OrderStatus:
        if v not in ADMIN_ORDER_STATUSES:
            raise ValueError(f"Status {v.value} is not allowed")
        return v


class CustomerSnapshot(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str


class OrderItemData(BaseModel):
    id: int
    product_id: int | None = None
    custom_proposal_id: int | None = None
    name: str
    price: Decimal
    size_price: Decimal | None = None
    quantity: int
    size: str | None = None
    image: str | None = None
    is_customized: bool
    customization_details: dict[str, Any] | None = None
    product: ProductSummary | None = None
    custom_proposal: ProposalSummary | None = None


class OrderData(BaseModel):
    """
    订单数据模型

    返回订单的详细信息，包含行项目、优惠券；管理端额外包含下单用户。
    """
    id: int
    order_no: str
    user_id: int
    subtotal: Decimal
    shipping_fee: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    voucher_id: int | None = None
    voucher_code: str | None = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    status: OrderStatus
    customer: CustomerSnapshot
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemData] = []
    voucher: VoucherSummary | None = None
    user: UserSummary | None = None


class OrdersData(BaseModel):
    data: list[OrderData]
    count: int


class SkippedItem(BaseModel):
    """下单时被跳过的行项目（index 是请求 items 中的下标）"""
    index: int
    product_id: int | None = None
    custom_proposal_id: int | None = None
    reason: SkipReason


class OrderPlacedData(BaseModel):
    """
    下单响应

    除订单本身外，还返回购物车清理情况和被跳过的行项目，
    便于前端核对。
    """
    order: OrderData
    cart_cleared: int
    initial_cart_count: int
    skipped_items: list[SkippedItem] = []
    voucher_rejected_reason: VoucherRejectReason | None = None
