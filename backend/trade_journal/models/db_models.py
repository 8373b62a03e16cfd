from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Store-side fallback only; repositories always write their own timestamps.
ISO_NOW = text("(strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_username", "username"),
        Index("idx_users_email", "email"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(String, nullable=False, server_default=ISO_NOW)
    updated_at = Column(String, nullable=False, server_default=ISO_NOW)


class UserSettings(Base):
    __tablename__ = "user_settings"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    default_currency = Column(String, nullable=False, server_default="USD")
    theme = Column(String, nullable=False, server_default="light")
    created_at = Column(String, nullable=False, server_default=ISO_NOW)
    updated_at = Column(String, nullable=False, server_default=ISO_NOW)


class SubAccount(Base):
    __tablename__ = "sub_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_sub_accounts_user_id_name"),
        Index("idx_sub_accounts_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    broker = Column(String, nullable=True)
    created_at = Column(String, nullable=False, server_default=ISO_NOW)
    updated_at = Column(String, nullable=False, server_default=ISO_NOW)


class Trade(Base):
    __tablename__ = "trades"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_trades_quantity_positive"),
        CheckConstraint("direction IN ('long', 'short')", name="ck_trades_direction"),
        CheckConstraint("status IN ('open', 'closed')", name="ck_trades_status"),
        Index("idx_trades_user_id", "user_id"),
        Index("idx_trades_sub_account_id", "sub_account_id"),
        Index("idx_trades_ticker", "ticker"),
        Index("idx_trades_entry_date", "entry_date"),
        Index("idx_trades_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sub_account_id = Column(Integer, ForeignKey("sub_accounts.id", ondelete="SET NULL"), nullable=True)
    ticker = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    entry_price = Column(Float, nullable=False)
    exit_price = Column(Float, nullable=True)
    direction = Column(String, nullable=False)
    status = Column(String, nullable=False, server_default="open")
    entry_date = Column(String, nullable=False)
    exit_date = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    commission = Column(Float, nullable=True, server_default=text("0.0"))
    created_at = Column(String, nullable=False, server_default=ISO_NOW)
    updated_at = Column(String, nullable=False, server_default=ISO_NOW)


# Core table handles used by the repositories.
users_table = User.__table__
user_settings_table = UserSettings.__table__
sub_accounts_table = SubAccount.__table__
trades_table = Trade.__table__
