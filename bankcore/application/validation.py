"""
Account validation pipeline - ordered list of ValidationStrategy
"""
import threading

from bankcore.domain.account import Account
from bankcore.domain.validation import (
    ValidationStrategy,
    MinimumBalanceValidation,
    ActiveAccountValidation,
    OwnerExistsValidation,
)


class AccountValidationPipeline:
    """
    Runs strategies in registration order

    validate() и validate_with_errors() согласованы:
    список ошибок пуст тогда и только тогда, когда validate() == True.
    """

    def __init__(self, strategies: list[ValidationStrategy] | None = None):
        self._strategies: list[ValidationStrategy] = list(strategies or [])
        self._lock = threading.Lock()

    @property
    def strategies(self) -> tuple[ValidationStrategy, ...]:
        with self._lock:
            return tuple(self._strategies)

    def validate(self, account: Account) -> bool:
        """True iff every strategy accepts the account"""
        return all(strategy.validate(account) for strategy in self.strategies)

    def validate_with_errors(self, account: Account) -> list[str]:
        """
        Run every strategy (no short-circuit)

        Returns:
            Сообщения непрошедших стратегий в порядке pipeline; пустой список - валиден
        """
        return [
            strategy.error_message
            for strategy in self.strategies
            if not strategy.validate(account)
        ]

    def add_strategy(self, strategy: ValidationStrategy) -> None:
        with self._lock:
            self._strategies.append(strategy)

    def remove_strategy(self, strategy: ValidationStrategy) -> None:
        """Remove a strategy; no error if it was not registered"""
        with self._lock:
            if strategy in self._strategies:
                self._strategies.remove(strategy)


def default_validation_pipeline() -> AccountValidationPipeline:
    """MinimumBalance -> ActiveAccount -> OwnerExists"""
    return AccountValidationPipeline([
        MinimumBalanceValidation(),
        ActiveAccountValidation(),
        OwnerExistsValidation(),
    ])
