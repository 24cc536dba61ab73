import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only-000000")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kanha.api.deps import get_db
from kanha.core.security import create_access_token, get_password_hash
from kanha.db.base import Base
from kanha.db.session import build_engine
from kanha.main import app
from kanha.models import Item, User

PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the startup hook would initialise the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, email, shop_name):
    user = User(email=email, shop_name=shop_name, password_hash=get_password_hash(PASSWORD))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "owner@kanhamedical.in", "Kanha Medical Agencies")


@pytest.fixture
def other_user(db):
    return _make_user(db, "rival@citypharma.in", "City Pharma")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(subject=str(other_user.id))}"}


@pytest.fixture
def make_item(db, user):
    """Insert an item directly, bypassing the API."""

    def _make(cat_no="AB100", product_name="Amoxicillin 500mg", quantity=50,
              mrp=Decimal("120.00"), selling_price=Decimal("100.00"), owner=None, **extra):
        item = Item(
            user_id=(owner or user).id,
            cat_no=cat_no,
            product_name=product_name,
            quantity=quantity,
            mrp=mrp,
            selling_price=selling_price,
            **extra,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def stock_of(db):
    """Current quantity of an item as committed by the API."""

    def _stock(item_id):
        db.expire_all()
        return db.query(Item.quantity).filter(Item.id == item_id).scalar()

    return _stock
