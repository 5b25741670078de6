"""
基础模型模块

定义所有模型共用的基础类和工具函数。
"""
from datetime import datetime, timezone

from sqlmodel import SQLModel


def utc_now() -> datetime:
    """
    获取当前 UTC 时间

    Returns:
        当前 UTC 时区的日期时间对象
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    把数据库读出的时间统一为带时区的 UTC 时间

    SQLite 不保存时区信息，读出来的是 naive datetime，
    和 utc_now() 比较前需要先补上时区。
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# 导出 SQLModel 供其他模块使用
__all__ = ["SQLModel", "utc_now", "ensure_utc"]
