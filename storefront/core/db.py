"""
数据库连接模块

管理数据库引擎和会话的创建。
使用 SQLModel 的 create_engine 创建数据库连接池。

重要提示：
- 确保在使用前导入所有模型（storefront.models），否则关系可能无法正确初始化
"""
from sqlmodel import Session, SQLModel, create_engine, select

from storefront.core.config import settings
from storefront.enums import UserRole
from storefront.models import User

# 创建数据库引擎（连接池）
engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI))


def init_db(session: Session) -> None:
    """
    初始化数据库

    创建缺失的表，并确保存在一个管理员账户（FIRST_ADMIN_EMAIL）。
    重复执行是安全的：已存在的表和管理员不会被改动。
    """
    SQLModel.metadata.create_all(session.get_bind())

    admin = session.exec(
        select(User).where(User.email == settings.FIRST_ADMIN_EMAIL)
    ).first()
    if not admin:
        admin = User(
            email=settings.FIRST_ADMIN_EMAIL,
            full_name=settings.FIRST_ADMIN_NAME,
            role=UserRole.admin,
        )
        session.add(admin)
        session.commit()
