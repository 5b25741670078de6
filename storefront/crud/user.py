"""用户 CRUD 操作"""
from sqlmodel import Session, select

from storefront.enums import UserRole
from storefront.models import User


def get_by_email(*, session: Session, email: str) -> User | None:
    """根据邮箱查询用户"""
    statement = select(User).where(User.email == email)
    return session.exec(statement).first()


def create(
    *,
    session: Session,
    email: str,
    full_name: str | None = None,
    role: UserRole = UserRole.customer,
) -> User:
    """创建用户"""
    user = User(email=email, full_name=full_name, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_by_id(*, session: Session, user_id: int) -> User | None:
    return session.get(User, user_id)
