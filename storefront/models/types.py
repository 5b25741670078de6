"""
自定义列类型

商品尺码、价格、图片、卖点等列表数据以带版本号的 JSON 存储：

    {"version": 1, "items": [...]}

只在存储边界解码一次。解码失败会抛出 MalformedColumnError，
而不是悄悄变成空列表，调用方可以区分"没有数据"和"数据损坏"。
"""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

LIST_COLUMN_VERSION = 1


class MalformedColumnError(ValueError):
    """数据库中的结构化列无法按约定格式解码"""

    def __init__(self, message: str, *, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw


def _jsonable(item: Any) -> Any:
    # 价格列表里可能是 Decimal，JSON 不支持
    if isinstance(item, Decimal):
        return float(item)
    return item


class VersionedList(TypeDecorator):
    """
    带版本号的列表列

    写入：接受 list/tuple/None，统一包装成 {"version": 1, "items": [...]}。
    读取：
    - NULL → []
    - {"version": 1, "items": [...]} → items
    - 旧数据的裸列表 [...] → 原样返回
    - 旧数据里被二次编码的 JSON 字符串 → 解析后按上面的规则处理
    - 其它任何形状 → MalformedColumnError
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> Any:
        if value is None:
            items: list[Any] = []
        elif isinstance(value, (list, tuple)):
            items = [_jsonable(v) for v in value]
        else:
            raise MalformedColumnError(
                f"Expected a list, got {type(value).__name__}", raw=value
            )
        return json.dumps({"version": LIST_COLUMN_VERSION, "items": items})

    def process_result_value(self, value: Any, dialect: Any) -> list[Any]:
        return decode_versioned_list(value)


def decode_versioned_list(value: Any) -> list[Any]:
    """按 VersionedList 的规则解码数据库里的原始文本"""
    if value is None:
        return []
    # 最多解两层：旧数据可能把 JSON 再编码成了字符串
    for _ in range(2):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise MalformedColumnError("Stored list is not valid JSON", raw=value) from exc
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        version = value.get("version")
        items = value.get("items")
        if version == LIST_COLUMN_VERSION and isinstance(items, list):
            return items
        raise MalformedColumnError(
            f"Unsupported list payload (version={version!r})", raw=value
        )
    raise MalformedColumnError(
        f"Stored list has unexpected type {type(value).__name__}", raw=value
    )
