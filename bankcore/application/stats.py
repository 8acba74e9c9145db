"""
Account statistics (thin wrapper over SQL aggregates)
"""
from sqlalchemy.orm import Session

from bankcore.application.store_errors import store_errors
from bankcore.domain.account import Account
from bankcore.domain.errors import InvalidArgumentError, NotFoundError
from bankcore.infrastructure.db.repositories.aggregation import (
    AccountSummary,
    BalanceRangeCounts,
    SqlAccountAggregationRepository,
    TotalBalance,
)

MAX_TOP_LIMIT = 100


class AccountStatsService:
    """Aggregates over the account set"""

    def __init__(self, db: Session, aggregation: SqlAccountAggregationRepository | None = None):
        self.db = db
        self.aggregation = aggregation or SqlAccountAggregationRepository(db)

    def summary_for_owner(self, owner_id: int) -> AccountSummary:
        with store_errors(self.db, "owner summary"):
            summary = self.aggregation.summary_for_owner(owner_id)
        if summary is None:
            raise NotFoundError(f"owner {owner_id} has no accounts")
        return summary

    def total_balance(self) -> TotalBalance:
        with store_errors(self.db, "total balance"):
            return self.aggregation.total_balance()

    def top_accounts(self, limit: int = 10) -> list[Account]:
        if limit <= 0 or limit > MAX_TOP_LIMIT:
            raise InvalidArgumentError(f"limit must be between 1 and {MAX_TOP_LIMIT}")
        with store_errors(self.db, "top accounts"):
            return self.aggregation.top_accounts_by_balance(limit)

    def balance_ranges(self) -> BalanceRangeCounts:
        with store_errors(self.db, "balance ranges"):
            return self.aggregation.count_by_balance_range()
