"""
Account validation strategies

Каждая стратегия = предикат над Account + сообщение об ошибке.
Порядок стратегий в pipeline задаёт порядок сообщений.
"""
from abc import ABC, abstractmethod
from decimal import Decimal

from bankcore.domain.account import Account

MINIMUM_BALANCE = Decimal("0")


class ValidationStrategy(ABC):
    """Single predicate over an account"""

    error_message: str = ""

    @abstractmethod
    def validate(self, account: Account) -> bool:
        """True if the account passes this rule"""
        pass


class MinimumBalanceValidation(ValidationStrategy):
    """balance >= 0 (a missing balance is reported by ActiveAccountValidation)"""

    error_message = "balance cannot be less than 0"

    def validate(self, account: Account) -> bool:
        if account.balance is None:
            return True
        return account.balance >= MINIMUM_BALANCE


class ActiveAccountValidation(ValidationStrategy):
    """Account has complete data: id and balance present"""

    error_message = "account must be active with complete data"

    def validate(self, account: Account) -> bool:
        return account.id is not None and account.balance is not None


class OwnerExistsValidation(ValidationStrategy):
    """
    Shape of owner_id only (not None, > 0)

    Существование владельца в UserRepository проверяет AccountService.
    """

    error_message = "account must have a valid owner id"

    def validate(self, account: Account) -> bool:
        return account.owner_id is not None and account.owner_id > 0
