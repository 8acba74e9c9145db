"""
SQLAlchemy ORM models (accounts + users)
"""
from decimal import Decimal
from sqlalchemy import String, DateTime, Integer, Boolean, Numeric, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from bankcore.infrastructure.db.session import Base


class UserRecord(Base):
    """
    Bank customer (owner of accounts)

    Поля nullable намеренно: валидация имени/email делается в User.create(),
    а не на уровне хранилища.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)  # BASIC, PREMIUM, VIP
    number: Mapped[str | None] = mapped_column(String(64), nullable=True)  # document number
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class AccountRecord(Base):
    """
    Account balance holder; owner_id references users.id (checked in AccountService)
    """
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=2),
        nullable=False,
        server_default="0",
        index=True
    )

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index('ix_accounts_owner_id', 'owner_id'),
    )


# Compound index for per-owner listings ordered by balance
Index('ix_accounts_owner_balance', AccountRecord.owner_id, AccountRecord.balance.desc())
