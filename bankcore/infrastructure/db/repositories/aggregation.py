"""
Account aggregates computed in SQL (server-side)
"""
from dataclasses import dataclass
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import func, case, and_

from bankcore.domain.account import Account
from bankcore.infrastructure.db.models import AccountRecord
from bankcore.infrastructure.db.repositories.accounts import to_account

# Границы диапазонов для count_by_balance_range: [0,1000) / [1000,5000) / [5000,inf)
RANGE_LOW_UPPER = Decimal("1000")
RANGE_MID_UPPER = Decimal("5000")


@dataclass(frozen=True)
class AccountSummary:
    owner_id: int
    total_balance: Decimal
    average_balance: Decimal
    min_balance: Decimal
    max_balance: Decimal
    account_count: int


@dataclass(frozen=True)
class TotalBalance:
    total_balance: Decimal
    total_accounts: int


@dataclass(frozen=True)
class BalanceRangeCounts:
    low: int      # [0, 1000)
    medium: int   # [1000, 5000)
    high: int     # [5000, inf)

    @property
    def total(self) -> int:
        return self.low + self.medium + self.high


def _to_decimal(value) -> Decimal:
    """SQLite returns float for AVG, PostgreSQL returns Decimal"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class SqlAccountAggregationRepository:
    """
    Aggregation queries over accounts

    Example:
        >>> repo = SqlAccountAggregationRepository(db)
        >>> repo.summary_for_owner(10)
        AccountSummary(owner_id=10, total_balance=Decimal('600.00'), ...)
    """

    def __init__(self, db: Session):
        self.db = db

    def summary_for_owner(self, owner_id: int) -> AccountSummary | None:
        """
        Sum/avg/min/max/count of balances for one owner

        Returns:
            AccountSummary или None если у владельца нет счетов
        """
        row = (
            self.db.query(
                func.sum(AccountRecord.balance),
                func.avg(AccountRecord.balance),
                func.min(AccountRecord.balance),
                func.max(AccountRecord.balance),
                func.count(AccountRecord.id),
            )
            .filter(AccountRecord.owner_id == owner_id)
            .one()
        )
        total, average, minimum, maximum, count = row
        if not count:
            return None

        return AccountSummary(
            owner_id=owner_id,
            total_balance=_to_decimal(total),
            average_balance=_to_decimal(average),
            min_balance=_to_decimal(minimum),
            max_balance=_to_decimal(maximum),
            account_count=count
        )

    def total_balance(self) -> TotalBalance:
        total, count = self.db.query(
            func.sum(AccountRecord.balance),
            func.count(AccountRecord.id),
        ).one()
        return TotalBalance(total_balance=_to_decimal(total), total_accounts=count or 0)

    def top_accounts_by_balance(self, limit: int) -> list[Account]:
        records = (
            self.db.query(AccountRecord)
            .order_by(AccountRecord.balance.desc(), AccountRecord.id.asc())
            .limit(limit)
            .all()
        )
        return [to_account(r) for r in records]

    def count_by_balance_range(self) -> BalanceRangeCounts:
        balance = AccountRecord.balance
        low, medium, high = self.db.query(
            func.sum(case((and_(balance >= 0, balance < RANGE_LOW_UPPER), 1), else_=0)),
            func.sum(case((and_(balance >= RANGE_LOW_UPPER, balance < RANGE_MID_UPPER), 1), else_=0)),
            func.sum(case((balance >= RANGE_MID_UPPER, 1), else_=0)),
        ).one()
        return BalanceRangeCounts(low=int(low or 0), medium=int(medium or 0), high=int(high or 0))
