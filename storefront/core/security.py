"""
安全模块

签发与解析 JWT 访问令牌。登录流程不在本服务内，
这里只保留令牌格式的唯一定义，供 deps.get_current_user 和运维脚本共用。
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from storefront.core.config import settings

ALGORITHM = "HS256"


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject)}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt
