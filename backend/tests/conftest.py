"""
Pytest configuration and fixtures for backend tests.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_api.models import (
    Base, User, TransactionCategory, TransactionSource, FinancialGoal,
    Transaction, TransactionSubcategory,
)
from shared.config.constants import (
    GoalType, SourceType, TransactionSubtype, TransactionType,
)
from shared.security.tenant_context import tenant_scope


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    # Create all tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_one(db_session):
    """First tenant."""
    user = User(id=1, email="one@test.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def user_two(db_session):
    """Second tenant."""
    user = User(id=2, email="two@test.com")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def as_user_one(user_one):
    """Bind user_one as the current tenant for the whole test."""
    with tenant_scope(user_one.id):
        yield user_one


@pytest.fixture
def make_source(db_session):
    """Factory that inserts a TransactionSource directly (bypassing the service)."""
    def _make(
        user,
        name,
        *,
        is_active=True,
        source_type=SourceType.BANK_TRANSACTION,
        description=None,
    ):
        source = TransactionSource(
            name=name,
            description=description,
            source_type=source_type,
            is_active=is_active,
            user_id=user.id,
        )
        db_session.add(source)
        db_session.commit()
        db_session.refresh(source)
        return source

    return _make


@pytest.fixture
def make_category(db_session):
    """Factory that inserts a TransactionCategory directly."""
    def _make(name):
        category = TransactionCategory(name=name)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return _make


@pytest.fixture
def make_goal(db_session):
    """Factory that inserts a FinancialGoal directly."""
    def _make(
        user,
        name,
        *,
        target_amount=Decimal("1000"),
        current_amount=Decimal("0"),
        goal_type=GoalType.SAVINGS,
        deadline=None,
        is_active=True,
        account=None,
    ):
        goal = FinancialGoal(
            name=name,
            goal_type=goal_type,
            target_amount=target_amount,
            current_amount=current_amount,
            deadline=deadline,
            is_active=is_active,
            account=account,
            user_id=user.id,
        )
        db_session.add(goal)
        db_session.commit()
        db_session.refresh(goal)
        return goal

    return _make


@pytest.fixture
def make_subcategory(db_session):
    """Factory that inserts a TransactionSubcategory directly."""
    def _make(category, name, *, is_active=True, description=None):
        subcategory = TransactionSubcategory(
            name=name,
            description=description,
            category_id=category.id,
            is_active=is_active,
        )
        db_session.add(subcategory)
        db_session.commit()
        db_session.refresh(subcategory)
        return subcategory

    return _make


@pytest.fixture
def make_transaction(db_session):
    """Factory that inserts a Transaction directly."""
    def _make(
        user,
        category,
        description="Groceries",
        *,
        amount=Decimal("50.00"),
        transaction_type=TransactionType.EXPENSE,
        subtype=TransactionSubtype.VARIABLE,
        source_type=SourceType.CASH,
        date=datetime(2024, 1, 15, 12, 0),
        subcategory=None,
        source_entity=None,
        reconciled=False,
    ):
        transaction = Transaction(
            type=transaction_type,
            subtype=subtype,
            source_type=source_type,
            description=description,
            amount=amount,
            date=date,
            category_id=category.id,
            subcategory_id=subcategory.id if subcategory is not None else None,
            source_entity_id=source_entity.id if source_entity is not None else None,
            reconciled=reconciled,
            user_id=user.id,
        )
        db_session.add(transaction)
        db_session.commit()
        db_session.refresh(transaction)
        return transaction

    return _make
