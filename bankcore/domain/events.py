"""
Account events - records of past successful mutations
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from bankcore.domain.account import Account


class EventKind(str, Enum):
    ACCOUNT_CREATED = "ACCOUNT_CREATED"
    BALANCE_CHANGED = "BALANCE_CHANGED"
    ACCOUNT_DELETED = "ACCOUNT_DELETED"


@dataclass(frozen=True)
class AccountCreated:
    account: Account

    kind = EventKind.ACCOUNT_CREATED


@dataclass(frozen=True)
class BalanceChanged:
    account: Account
    old_balance: Decimal
    new_balance: Decimal

    kind = EventKind.BALANCE_CHANGED

    @property
    def change(self) -> Decimal:
        """Absolute size of the change"""
        return abs(self.new_balance - self.old_balance)


@dataclass(frozen=True)
class AccountDeleted:
    account_id: int

    kind = EventKind.ACCOUNT_DELETED


AccountEvent = AccountCreated | BalanceChanged | AccountDeleted
