"""优惠券 CRUD 操作"""
import secrets
from collections.abc import Sequence

from sqlalchemy import update
from sqlmodel import Session, col, select

from storefront.api.schemas import VoucherCreateRequest
from storefront.core.config import settings
from storefront.enums import VoucherStatus
from storefront.models import UserVoucher, Voucher, ensure_utc, utc_now


def create_voucher(*, session: Session, body: VoucherCreateRequest) -> Voucher:
    """创建优惠券模板（默认启用）"""
    voucher = Voucher(
        name=body.name,
        description=body.description,
        percent=body.percent,
        image=body.image,
        status=VoucherStatus.enabled,
        expiration_type=body.expiration_type,
        expiration_duration=body.expiration_duration,
    )
    session.add(voucher)
    session.commit()
    session.refresh(voucher)
    return voucher


def get_voucher(*, session: Session, voucher_id: int) -> Voucher | None:
    return session.get(Voucher, voucher_id)


def toggle_status(*, session: Session, voucher: Voucher) -> Voucher:
    """启用/停用模板。停用只影响之后的核销，已用掉的券不受影响"""
    voucher.status = (
        VoucherStatus.disabled if voucher.status == VoucherStatus.enabled else VoucherStatus.enabled
    )
    voucher.updated_at = utc_now()
    session.add(voucher)
    session.commit()
    session.refresh(voucher)
    return voucher


def _generate_code(session: Session) -> str:
    # 8 位十六进制随机码，碰撞时重新生成
    for _ in range(5):
        code = f"{settings.VOUCHER_CODE_PREFIX}-{secrets.token_hex(4).upper()}"
        exists = session.exec(
            select(UserVoucher.id).where(UserVoucher.voucher_code == code)
        ).first()
        if exists is None:
            return code
    raise RuntimeError("Could not generate a unique voucher code")


def issue_grant(*, session: Session, voucher: Voucher, user_id: int) -> UserVoucher:
    """
    向用户发放一张优惠券

    过期时间在发放时按模板规则算好并写入，读取时不再计算。
    """
    sent_at = utc_now()
    grant = UserVoucher(
        user_id=user_id,
        voucher_id=voucher.id,
        voucher_code=_generate_code(session),
        sent_at=sent_at,
        expires_at=voucher.expiry_from(sent_at),
    )
    session.add(grant)
    session.commit()
    session.refresh(grant)
    return grant


def get_user_voucher(
    *,
    session: Session,
    user_voucher_id: int,
    user_id: int,
    for_update: bool = False,
) -> UserVoucher | None:
    """
    查询属于某用户的一张优惠券

    for_update=True 时加行锁，并发下单核销同一张券时会在这里串行化。
    """
    stmt = select(UserVoucher).where(
        UserVoucher.id == user_voucher_id, UserVoucher.user_id == user_id
    )
    if for_update:
        stmt = stmt.with_for_update()
    return session.exec(stmt).first()


def mark_used(*, session: Session, user_voucher: UserVoucher) -> bool:
    """
    核销优惠券（不提交事务）

    使用条件更新 used_at IS NULL，只有一个事务能更新成功。
    返回 False 表示这张券已经被别的事务用掉了。
    """
    result = session.exec(
        update(UserVoucher)
        .where(
            col(UserVoucher.id) == user_voucher.id,
            col(UserVoucher.used_at).is_(None),
        )
        .values(used_at=utc_now())
    )
    if result.rowcount != 1:
        return False
    session.refresh(user_voucher)
    return True


def list_unused_grants(
    *, session: Session, user_id: int
) -> Sequence[tuple[UserVoucher, Voucher]]:
    """查询用户未使用的优惠券及其模板（最新在前），过期/停用由调用方过滤"""
    stmt = (
        select(UserVoucher, Voucher)
        .join(Voucher, col(Voucher.id) == col(UserVoucher.voucher_id))
        .where(UserVoucher.user_id == user_id, col(UserVoucher.used_at).is_(None))
        .order_by(col(UserVoucher.created_at).desc(), col(UserVoucher.id).desc())
    )
    return session.exec(stmt).all()


def backfill_expiry(*, session: Session) -> int:
    """
    为缺少过期时间的旧券补录 expires_at

    expires_at = sent_at + 模板有效期。返回补录的数量。
    """
    stmt = (
        select(UserVoucher, Voucher)
        .join(Voucher, col(Voucher.id) == col(UserVoucher.voucher_id))
        .where(col(UserVoucher.expires_at).is_(None))
    )
    filled = 0
    for grant, voucher in session.exec(stmt).all():
        grant.expires_at = voucher.expiry_from(ensure_utc(grant.sent_at))
        session.add(grant)
        filled += 1
    session.commit()
    return filled
