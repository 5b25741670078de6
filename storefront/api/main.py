"""
API 路由聚合模块

将所有业务路由模块聚合到一个统一的 router 中。
这个 router 会被注册到主应用（storefront/main.py）上。

路由模块说明：
- products: 商品目录（列表、详情）
- cart: 购物车（查询、加入、删除）
- proposals: 定制方案（出具、查看）
- vouchers: 优惠券（顾客端查询/校验，管理端创建/发放/启停）
- orders: 订单（下单、查询、修改状态、购物车工具）
- admin_orders: 管理端订单
- utils: 工具相关（健康检查等）
"""
from fastapi import APIRouter

from storefront.api.routes import (
    admin_orders,  # 管理端订单路由
    cart,  # 购物车路由
    orders,  # 订单路由
    products,  # 商品路由
    proposals,  # 定制方案路由
    utils,  # 工具路由
    vouchers,  # 优惠券路由
)

# 创建主 API 路由器
api_router = APIRouter()

# 注册所有业务路由模块
# 每个模块的路径前缀在各自的 router 中定义
api_router.include_router(products.router)  # /products/*
api_router.include_router(cart.router)  # /cart/*
api_router.include_router(proposals.router)  # /proposals/*
api_router.include_router(vouchers.router)  # /vouchers/*
api_router.include_router(vouchers.admin_router)  # /admin/vouchers/*
api_router.include_router(orders.router)  # /orders/*
api_router.include_router(admin_orders.router)  # /admin/orders/*
api_router.include_router(utils.router)  # /utils/*
