"""
Transfer use case - move money between two accounts under business rules
"""
import logging
import uuid
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bankcore.application.account_cache import AccountCache, get_account_cache
from bankcore.application.events import AccountEventBus, get_event_bus
from bankcore.application.transaction_history import TransactionHistory, get_transaction_history
from bankcore.domain.account import Account
from bankcore.domain.errors import NotFoundError
from bankcore.domain.events import BalanceChanged
from bankcore.domain.repositories import AccountRepository, UserRepository
from bankcore.domain.transaction import Transaction
from bankcore.domain.transfer import TransferResult
from bankcore.infrastructure.db.repositories.accounts import SqlAccountRepository
from bankcore.infrastructure.db.repositories.users import SqlUserRepository
from bankcore.utils.validation import validate_decimal_amount, validate_and_normalize_amount

logger = logging.getLogger(__name__)

MAX_TRANSFER_AMOUNT = Decimal("10000")
MIN_BALANCE_AFTER_TRANSFER = Decimal("0")


class TransferRejected(Exception):
    """Business rule failed on the loaded accounts (becomes a failure result)"""
    pass


class TransferUseCase:
    """
    Use case: Перевод между счетами

    Процесс:
    1. Проверки без обращения к БД (тот же счёт, сумма > 0, лимит, 2 знака после запятой)
    2. Загрузить оба счёта с блокировкой строк (SELECT ... FOR UPDATE, по возрастанию id)
    3. Бизнес-проверки (баланс, владельцы)
    4. Записать from, затем to - одной транзакцией БД
    5. Инвалидировать кэш, записать историю, опубликовать BalanceChanged (from, затем to)

    Никогда не бросает исключение наружу: любая ошибка -> TransferResult(success=False).
    """

    def __init__(
        self,
        db: Session,
        accounts: AccountRepository | None = None,
        users: UserRepository | None = None,
        events: AccountEventBus | None = None,
        cache: AccountCache | None = None,
        history: TransactionHistory | None = None
    ):
        self.db = db
        self.accounts = accounts or SqlAccountRepository(db)
        self.users = users or SqlUserRepository(db)
        self.events = events or get_event_bus()
        self.cache = cache if cache is not None else get_account_cache()
        self.history = history if history is not None else get_transaction_history()

    def execute(self, from_account_id: int, to_account_id: int, amount: Decimal) -> TransferResult:
        """
        Перевести amount со счёта from_account_id на to_account_id

        Args:
            from_account_id: ID счёта-источника
            to_account_id: ID счёта-получателя
            amount: Сумма (0 < amount <= 10000)

        Returns:
            TransferResult (success=False с причиной в message при любой ошибке)
        """
        logger.info("Initiating transfer from %s to %s amount %s", from_account_id, to_account_id, amount)

        def failure(reason: str) -> TransferResult:
            logger.info("Transfer %s -> %s rejected: %s", from_account_id, to_account_id, reason)
            return TransferResult.failure(from_account_id, to_account_id, amount, reason)

        if from_account_id == to_account_id:
            return failure("cannot transfer to the same account")
        if amount <= 0:
            return failure("amount must be positive")
        if amount > MAX_TRANSFER_AMOUNT:
            return failure(f"amount exceeds maximum limit of {MAX_TRANSFER_AMOUNT}")
        is_valid, error = validate_decimal_amount(amount)
        if not is_valid:
            return failure(error)
        amount = validate_and_normalize_amount(amount)

        try:
            from_account, to_account = self._load_pair(from_account_id, to_account_id)
            self._check_rules(from_account, to_account, amount)
            updated_from, updated_to = self._persist_pair(from_account, to_account, amount)
        except TransferRejected as e:
            self.db.rollback()
            return failure(str(e))
        except (SQLAlchemyError, NotFoundError) as e:
            self.db.rollback()
            logger.exception("Transfer %s -> %s failed in store", from_account_id, to_account_id)
            return TransferResult.failure(
                from_account_id, to_account_id, amount, f"transfer failed: {e}"
            )

        transfer_id = str(uuid.uuid4())

        self.cache.invalidate(from_account_id)
        self.cache.invalidate(to_account_id)

        outgoing, incoming = Transaction.transfer_pair(transfer_id, from_account_id, to_account_id, amount)
        self.history.add(outgoing)
        self.history.add(incoming)

        self.events.publish(BalanceChanged(
            account=updated_from,
            old_balance=from_account.balance,
            new_balance=updated_from.balance
        ))
        self.events.publish(BalanceChanged(
            account=updated_to,
            old_balance=to_account.balance,
            new_balance=updated_to.balance
        ))

        logger.info("Transfer %s completed: %s -> %s amount %s", transfer_id, from_account_id, to_account_id, amount)
        return TransferResult.ok(transfer_id, from_account_id, to_account_id, amount)

    def _load_pair(self, from_account_id: int, to_account_id: int) -> tuple[Account, Account]:
        locked = {
            account_id: self.accounts.get_for_update(account_id)
            for account_id in sorted((from_account_id, to_account_id))
        }
        from_account = locked[from_account_id]
        to_account = locked[to_account_id]
        if from_account is None:
            raise TransferRejected("source account not found")
        if to_account is None:
            raise TransferRejected("destination account not found")
        return from_account, to_account

    def _check_rules(self, from_account: Account, to_account: Account, amount: Decimal) -> None:
        if from_account.balance < amount:
            raise TransferRejected("insufficient balance")
        if from_account.balance - amount < MIN_BALANCE_AFTER_TRANSFER:
            raise TransferRejected("transfer would leave balance below minimum")
        if not self.users.exists(from_account.owner_id):
            raise TransferRejected("source account owner not found")
        if not self.users.exists(to_account.owner_id):
            raise TransferRejected("destination account owner not found")

    def _persist_pair(self, from_account: Account, to_account: Account, amount: Decimal) -> tuple[Account, Account]:
        """
        Debit from, then credit to; one commit for both

        Если любая запись или commit падает, rollback откатывает обе стороны.
        """
        updated_from = self.accounts.update(from_account.with_balance(from_account.balance - amount))
        updated_to = self.accounts.update(to_account.with_balance(to_account.balance + amount))
        self.db.commit()
        return updated_from, updated_to
