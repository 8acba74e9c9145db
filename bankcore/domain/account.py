"""
Account domain entity
"""
from dataclasses import dataclass, replace
from decimal import Decimal


@dataclass(frozen=True)
class Account:
    """
    Account - balance holder owned by a User

    Поля могут отсутствовать (None) у непроверенной записи: полноту данных
    проверяет AccountValidationPipeline, а не конструктор.
    """
    id: int | None
    owner_id: int | None
    balance: Decimal | None

    def with_balance(self, balance: Decimal) -> "Account":
        """Copy with the same id/owner and a new balance"""
        return replace(self, balance=balance)

    def with_id(self, account_id: int) -> "Account":
        return replace(self, id=account_id)
