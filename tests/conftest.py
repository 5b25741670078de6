from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, delete

from storefront.api.deps import get_db
from storefront.core import security
from storefront.enums import ExpirationType, ProposalCategory, UserRole, VoucherStatus
from storefront.main import app
from storefront.models import (
    CartItem,
    Category,
    CustomProposal,
    Order,
    OrderItem,
    Product,
    User,
    UserVoucher,
    Voucher,
    utc_now,
)


class FakeRedis:
    """只实现用到的命令：PUBLISH / SET NX EX / EVAL（释放锁）/ PING"""

    def __init__(self) -> None:
        self.published: list[tuple[str, str]] = []
        self.store: dict[str, str] = {}
        self.fail_publish = False

    def publish(self, channel: str, message: str) -> int:
        if self.fail_publish:
            raise ConnectionError("redis is down")
        self.published.append((channel, message))
        return 1

    def set(self, key: str, value: str, ex: int | None = None, nx: bool = False) -> bool | None:
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    def eval(self, script: str, numkeys: int, key: str, value: str) -> int:
        if self.store.get(key) == value:
            del self.store[key]
            return 1
        return 0

    def ping(self) -> bool:
        return True


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
        # Clean tables after each test (children first).
        session.rollback()
        session.exec(delete(OrderItem))
        session.exec(delete(CartItem))
        session.exec(delete(UserVoucher))
        session.exec(delete(CustomProposal))
        session.exec(delete(Order))
        session.exec(delete(Voucher))
        session.exec(delete(Product))
        session.exec(delete(Category))
        session.exec(delete(User))
        session.commit()


@pytest.fixture(scope="function")
def client(engine, db) -> Generator[TestClient, None, None]:
    def _override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr("storefront.core.redis.get_redis", lambda: fake)
    monkeypatch.setattr("storefront.services.notification_service.get_redis", lambda: fake)
    return fake


def auth_headers(user: User) -> dict[str, str]:
    token = security.create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.customer, is_active: bool = True) -> User:
        counter["n"] += 1
        user = User(
            email=f"{role.value}{counter['n']}@example.com",
            full_name=f"{role.value.title()} {counter['n']}",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(db) -> Callable[..., Product]:
    def _make(
        name: str = "Basic Tee",
        price: str = "100.00",
        sizes: list[str] | None = None,
        prices: list[float] | None = None,
        **extra,
    ) -> Product:
        category = Category(name="Apparel", kind="apparel")
        db.add(category)
        db.commit()
        product = Product(
            name=name,
            price=Decimal(price),
            category_id=category.id,
            image=f"/images/{name.lower().replace(' ', '-')}.png",
            available_sizes=sizes or [],
            prices=prices or [],
            **extra,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_proposal(db) -> Callable[..., CustomProposal]:
    def _make(
        clerk: User,
        customer: User,
        category: ProposalCategory = ProposalCategory.apparel,
        total_price: str = "300.00",
        **extra,
    ) -> CustomProposal:
        proposal = CustomProposal(
            user_id=clerk.id,
            customer_id=customer.id,
            name=f"Custom {category.value}",
            category=category,
            customization_request="Embroider initials on the left chest",
            designer_message="Navy thread on white",
            material="Cotton",
            total_price=Decimal(total_price),
            features=["embroidery", "gift box"],
            images=["/proposals/front.png", "/proposals/back.png"],
            size_options=["S", "M", "L"],
            **extra,
        )
        db.add(proposal)
        db.commit()
        db.refresh(proposal)
        return proposal

    return _make


@pytest.fixture
def make_grant(db) -> Callable[..., UserVoucher]:
    def _make(
        user: User,
        percent: int = 10,
        enabled: bool = True,
        expires_in_days: int | None = 7,
        used: bool = False,
    ) -> UserVoucher:
        voucher = Voucher(
            name=f"{percent}% off",
            percent=percent,
            status=VoucherStatus.enabled if enabled else VoucherStatus.disabled,
            expiration_type=ExpirationType.days,
            expiration_duration=7,
        )
        db.add(voucher)
        db.commit()
        sent_at = utc_now()
        grant = UserVoucher(
            user_id=user.id,
            voucher_id=voucher.id,
            voucher_code=f"VC-TEST{voucher.id:04d}",
            sent_at=sent_at,
            expires_at=sent_at + timedelta(days=expires_in_days)
            if expires_in_days is not None
            else None,
            used_at=sent_at if used else None,
        )
        db.add(grant)
        db.commit()
        db.refresh(grant)
        return grant

    return _make
