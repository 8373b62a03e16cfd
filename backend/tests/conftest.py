import itertools
from datetime import datetime, timedelta, timezone

import pytest

from trade_journal.database import Database
from trade_journal.init_db import init_db
from trade_journal.models import TradeCreate
from trade_journal.repositories import SubAccountRepository, TradeRepository, UserRepository

BASE_DATE = datetime(2024, 3, 20, 14, 30, tzinfo=timezone.utc)


def iso_date(offset_days: int = 0) -> str:
    """Fixed reference date shifted by whole days, ISO-8601 UTC."""
    return (BASE_DATE + timedelta(days=offset_days)).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def simple_hash(password: str) -> str:
    return f"hashed_{password}"


@pytest.fixture()
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'trading_app_test.db'}")
    init_db(db)
    yield db
    db.close()


@pytest.fixture()
def clock(monkeypatch):
    """Deterministic, strictly increasing timestamps for every repository write."""
    ticks = itertools.count()

    def fake_now() -> str:
        moment = BASE_DATE + timedelta(seconds=next(ticks))
        return moment.strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    for module in ("user_repository", "sub_account_repository", "trade_repository"):
        monkeypatch.setattr(f"trade_journal.repositories.{module}.utc_now_iso", fake_now)
    return fake_now


@pytest.fixture()
def user_repository(database):
    return UserRepository(database)


@pytest.fixture()
def sub_account_repository(database):
    return SubAccountRepository(database)


@pytest.fixture()
def trade_repository(database):
    return TradeRepository(database)


@pytest.fixture()
def user_id(user_repository):
    return user_repository.create_user("tradeUser", "trade@example.com", simple_hash("password"))


@pytest.fixture()
def other_user_id(user_repository):
    return user_repository.create_user("otherTradeUser", "othertrade@example.com", simple_hash("password"))


@pytest.fixture()
def sub_account_id(sub_account_repository, user_id):
    return sub_account_repository.create_sub_account(
        user_id, "Trade Test SubAcc", "Sub account for trade tests"
    )


@pytest.fixture()
def trade_data(user_id, sub_account_id):
    """Build a TradeCreate for the test user, with keyword overrides."""

    def build(**overrides) -> TradeCreate:
        values = {
            "user_id": user_id,
            "sub_account_id": sub_account_id,
            "ticker": "TST",
            "quantity": 10,
            "entry_price": 100.0,
            "direction": "long",
            "entry_date": iso_date(-1),
            "notes": "Initial trade notes",
            "commission": 1.99,
        }
        values.update(overrides)
        return TradeCreate(**values)

    return build
