"""
Account use cases - create/read/update/delete accounts
"""
import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from bankcore.application.account_cache import AccountCache, AccountSearchService, get_account_cache
from bankcore.application.events import AccountEventBus, get_event_bus
from bankcore.application.store_errors import store_errors
from bankcore.application.transaction_history import TransactionHistory, get_transaction_history
from bankcore.application.validation import AccountValidationPipeline, default_validation_pipeline
from bankcore.domain.account import Account
from bankcore.domain.category import AccountCategory, default_category_tree
from bankcore.domain.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
)
from bankcore.domain.events import AccountCreated, AccountDeleted, BalanceChanged
from bankcore.domain.repositories import AccountRepository, UserRepository
from bankcore.domain.transaction import Transaction
from bankcore.infrastructure.db.repositories.accounts import SqlAccountRepository
from bankcore.infrastructure.db.repositories.users import SqlUserRepository
from bankcore.utils.validation import validate_decimal_amount, validate_and_normalize_amount

logger = logging.getLogger(__name__)


class AccountService:
    """
    Orchestrates AccountRepository + UserRepository + validation + events

    Процесс для изменяющих операций:
    1. Проверить входные данные / состояние
    2. Записать в репозиторий и сделать commit
    3. Инвалидировать кэш, записать историю
    4. Опубликовать событие
    """

    def __init__(
        self,
        db: Session,
        accounts: AccountRepository | None = None,
        users: UserRepository | None = None,
        pipeline: AccountValidationPipeline | None = None,
        events: AccountEventBus | None = None,
        cache: AccountCache | None = None,
        history: TransactionHistory | None = None,
        categories: AccountCategory | None = None
    ):
        self.db = db
        self.accounts = accounts or SqlAccountRepository(db)
        self.users = users or SqlUserRepository(db)
        self.pipeline = pipeline or default_validation_pipeline()
        self.events = events or get_event_bus()
        self.cache = cache if cache is not None else get_account_cache()
        self.history = history if history is not None else get_transaction_history()
        self.categories = categories or default_category_tree()

    def create(self, account: Account) -> Account:
        """
        Создать счёт

        Args:
            account: Счёт (id можно не указывать - будет выдан следующий)

        Returns:
            Сохранённый Account

        Raises:
            InvalidArgumentError: если счёт не прошёл валидацию
            PreconditionFailedError: если владельца нет
            ConflictError: если счёт с таким id уже есть
            SystemFailureError: если хранилище недоступно
        """
        logger.info("Creating account for owner %s", account.owner_id)

        with store_errors(self.db, "create account"):
            if account.id is None:
                account = account.with_id(self.accounts.next_id())

            if account.balance is not None:
                account = account.with_balance(self._normalize_money(account.balance))

            if not self.pipeline.validate(account):
                errors = self.pipeline.validate_with_errors(account)
                logger.info("Account validation failed: %s", errors)
                raise InvalidArgumentError(
                    "account validation failed: " + ", ".join(errors),
                    errors=errors
                )

            if not self.users.exists(account.owner_id):
                raise PreconditionFailedError(f"owner {account.owner_id} does not exist")

            if self.accounts.exists(account.id):
                raise ConflictError(f"account {account.id} already exists")

            try:
                saved = self.accounts.save(account)
                self.db.commit()
            except IntegrityError as exc:
                # параллельный запрос успел вставить тот же id между exists() и commit
                logger.info("Account %s inserted concurrently: %s", account.id, exc.orig)
                raise ConflictError(f"account {account.id} already exists") from exc

        self.events.publish(AccountCreated(account=saved))
        return saved

    def get_by_id(self, account_id: int) -> Account:
        """
        Raises:
            NotFoundError: если счёта нет
        """
        with store_errors(self.db, "read account"):
            account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"account {account_id} not found")
        return account

    def find_cached(self, account_id: int) -> Account:
        """get_by_id through the read-through cache"""
        with store_errors(self.db, "read account"):
            account = AccountSearchService(self.accounts, self.cache).find_by_id_with_cache(account_id)
        if account is None:
            raise NotFoundError(f"account {account_id} not found")
        return account

    def list_by_owner(self, owner_id: int) -> list[Account]:
        with store_errors(self.db, "list accounts"):
            return list(self.accounts.list_by_owner(owner_id))

    def list_all(self) -> list[Account]:
        with store_errors(self.db, "list accounts"):
            return list(self.accounts.list_all())

    def exists(self, account_id: int) -> bool:
        with store_errors(self.db, "check account"):
            return self.accounts.exists(account_id)

    def update_balance(self, account_id: int, new_balance: Decimal) -> Account:
        """
        Установить новый баланс счёта

        Raises:
            InvalidArgumentError: если new_balance < 0 или в нём больше 2 знаков после запятой
            NotFoundError: если счёта нет
        """
        if new_balance < 0:
            raise InvalidArgumentError("balance cannot be less than 0")
        new_balance = self._normalize_money(new_balance)

        with store_errors(self.db, "update balance"):
            account = self.accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"account {account_id} not found")

            old_balance = account.balance
            updated = Account(id=account.id, owner_id=account.owner_id, balance=new_balance)

            errors = self.pipeline.validate_with_errors(updated)
            if errors:
                raise InvalidArgumentError(
                    "account validation failed: " + ", ".join(errors),
                    errors=errors
                )

            saved = self.accounts.update(updated)
            self.db.commit()

        self.cache.invalidate(account_id)
        if new_balance != old_balance:
            self.history.add(Transaction.for_balance_change(account_id, old_balance, new_balance))
        self.events.publish(BalanceChanged(account=saved, old_balance=old_balance, new_balance=new_balance))

        logger.info("Balance of account %s updated: %s -> %s", account_id, old_balance, new_balance)
        return saved

    def delete(self, account_id: int) -> None:
        """
        Удалить счёт (только с нулевым балансом)

        Raises:
            NotFoundError: если счёта нет
            PreconditionFailedError: если баланс > 0
        """
        with store_errors(self.db, "delete account"):
            account = self.accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"account {account_id} not found")

            if account.balance > 0:
                logger.info("Refusing to delete account %s with balance %s", account_id, account.balance)
                raise PreconditionFailedError("cannot delete account with positive balance")

            self.accounts.delete(account_id)
            self.db.commit()

        self.cache.invalidate(account_id)
        self.history.clear(account_id)
        self.events.publish(AccountDeleted(account_id=account_id))

    @staticmethod
    def _normalize_money(value: Decimal) -> Decimal:
        """Balance with exactly two decimal places; InvalidArgumentError if it has more"""
        is_valid, error = validate_decimal_amount(value)
        if not is_valid:
            raise InvalidArgumentError(error)
        return validate_and_normalize_amount(value)

    def category_of(self, account_id: int) -> AccountCategory | None:
        """Balance category of an existing account (None if outside the tree)"""
        account = self.get_by_id(account_id)
        return self.categories.find_optimal_category(account.balance)

    def recent_transactions(self, account_id: int, limit: int = 10) -> list[Transaction]:
        """Most recent first; NotFoundError for an unknown account"""
        if not self.exists(account_id):
            raise NotFoundError(f"account {account_id} not found")
        return self.history.last_n(account_id, limit)

