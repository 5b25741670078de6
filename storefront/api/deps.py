"""
FastAPI 依赖注入模块

提供可复用的依赖项，用于路由处理函数中。

关键概念：
- Depends: FastAPI 的依赖注入装饰器
- Generator: 用于创建需要清理的资源（如数据库会话）
- HTTPBearer: 从 Authorization: Bearer <token> 请求头提取 token
"""
from collections.abc import Generator  # 生成器类型，用于资源管理
from typing import Annotated  # 类型注解，用于依赖注入

import jwt  # JWT 解析库
from fastapi import Depends, HTTPException, status  # FastAPI 核心功能
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # Bearer 方案
from jwt.exceptions import InvalidTokenError  # JWT 无效异常
from pydantic import ValidationError  # Pydantic 验证异常
from sqlmodel import Session  # 数据库会话

from storefront.api.errors import forbidden
from storefront.api.schemas import TokenPayload
from storefront.core import security
from storefront.core.config import settings
from storefront.core.db import engine
from storefront.enums import UserRole
from storefront.models import User

reusable_oauth2 = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    """
    获取数据库会话（依赖注入）

    每个请求一个会话。请求结束时会话关闭，未提交的事务随之回滚。
    """
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]  # 数据库会话依赖
TokenDep = Annotated[
    HTTPAuthorizationCredentials, Depends(reusable_oauth2)
]  # JWT token 依赖


def get_current_user(
    session: SessionDep, token: TokenDep
) -> User:
    """
    获取当前登录用户（依赖注入）

    从 JWT token 中解析用户 ID，并查询数据库获取完整用户对象。
    token 无效、用户不存在或已停用时返回 401。
    """
    try:
        token_str = token.credentials
        payload = jwt.decode(
            token_str, settings.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except (InvalidTokenError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if not token_data.sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    try:
        user_id = int(token_data.sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_admin(current_user: CurrentUser) -> User:
    """要求当前用户是管理员"""
    if current_user.role != UserRole.admin:
        raise forbidden()
    return current_user


def get_current_staff(current_user: CurrentUser) -> User:
    """要求当前用户是店员或管理员（出具定制方案）"""
    if current_user.role not in (UserRole.clerk, UserRole.admin):
        raise forbidden()
    return current_user


AdminUser = Annotated[User, Depends(get_current_admin)]
StaffUser = Annotated[User, Depends(get_current_staff)]
