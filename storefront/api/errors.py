"""
自定义异常模块

定义应用特定的异常类，用于统一的错误处理。
所有业务异常都继承自 AppError，在 main.py 中有统一的异常处理器。

错误码约定（前三位是 HTTP 状态码）：
- 403001: 角色无权访问
- 404001: 用户不存在（发券、出具方案时指定的顾客）
- 404101 商品 / 404201 订单 / 404301 定制方案 / 404401 优惠券模板
  / 404402 用户优惠券 / 404501 购物车条目
- 400401 优惠券已使用 / 400402 已过期 / 400403 未启用
- 500301: 下单事务失败（已整体回滚）
"""
from __future__ import annotations


class AppError(Exception):
    """
    应用自定义异常类

    用于业务逻辑中的错误处理，包含：
    - code: 业务错误码（用于前端区分不同错误）
    - message: 错误消息（用户友好的提示）
    - status_code: HTTP 状态码（400, 404, 500 等）

    使用示例：
        raise AppError(code=404201, message="Order not found", status_code=404)
    """

    def __init__(self, *, code: int, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


def forbidden() -> AppError:
    return AppError(code=403001, message="Forbidden", status_code=403)


def not_found(code: int, what: str) -> AppError:
    """
    创建"资源不存在"异常（便捷函数）

    使用示例：
        raise not_found(404101, "Product")
    """
    return AppError(code=code, message=f"{what} not found", status_code=404)


def order_placement_failed() -> AppError:
    """
    下单事务失败

    具体异常只写日志，不把数据库错误细节返回给客户端。
    """
    return AppError(code=500301, message="Failed to place order", status_code=500)
