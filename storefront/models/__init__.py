"""
数据库模型定义模块

本模块使用 SQLModel 定义所有数据库表结构。

模型按功能拆分：
- user.py: 用户模型（顾客/店员/管理员）
- catalog.py: 分类与商品
- proposal.py: 定制方案
- voucher.py: 优惠券模板与用户优惠券
- cart.py: 购物车
- order.py: 订单与订单行项目
- types.py: 带版本号的列表列类型
"""
from sqlmodel import SQLModel

from .base import ensure_utc, utc_now
from .cart import CartItem
from .catalog import Category, Product
from .order import Order, OrderItem
from .proposal import CustomProposal
from .types import MalformedColumnError, VersionedList
from .user import User
from .voucher import UserVoucher, Voucher

__all__ = [
    "SQLModel",
    "utc_now",
    "ensure_utc",
    "User",
    "Category",
    "Product",
    "CustomProposal",
    "Voucher",
    "UserVoucher",
    "CartItem",
    "Order",
    "OrderItem",
    "MalformedColumnError",
    "VersionedList",
]
