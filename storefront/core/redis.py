"""
Redis 连接模块

管理 Redis 客户端连接，使用单例模式确保全局只有一个连接实例。
Redis 在本项目中的用途：
- notifications.{user_id}: 用户个人通知频道（下单成功、收到优惠券、收到定制方案）
- 定时任务的分布式锁（多个调度器实例只有一个执行）

使用 @lru_cache 装饰器实现单例模式，避免重复创建连接。
"""
from __future__ import annotations

from functools import lru_cache  # 缓存装饰器，用于实现单例模式

import redis  # Redis 客户端库

from storefront.core.config import settings


@lru_cache(maxsize=1)
def get_redis() -> redis.Redis:
    """
    获取 Redis 客户端实例（单例模式）

    第一次调用时创建连接，后续调用返回缓存的实例。
    创建实例不会立即连接，首次发送命令时才建立连接。
    """
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,  # 自动解码响应为字符串（而不是字节）
    )


_RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


def acquire_lock(lock_key: str, lock_value: str, expire_seconds: int = 60) -> bool:
    """
    获取分布式锁（SET NX EX）

    多个调度器实例同时运行定时任务时，只有拿到锁的实例会执行。
    """
    return bool(get_redis().set(lock_key, lock_value, ex=expire_seconds, nx=True))


def release_lock(lock_key: str, lock_value: str) -> bool:
    """释放分布式锁，lock_value 必须与获取时一致（Lua 脚本保证原子性）"""
    return bool(get_redis().eval(_RELEASE_LOCK_SCRIPT, 1, lock_key, lock_value))
