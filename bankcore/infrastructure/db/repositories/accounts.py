"""
Account Repository - SQLAlchemy adapter for the accounts table
"""
from typing import Iterator
from sqlalchemy.orm import Session
from sqlalchemy import func

from bankcore.domain.account import Account
from bankcore.domain.errors import NotFoundError
from bankcore.domain.repositories import AccountRepository
from bankcore.infrastructure.db.models import AccountRecord


def to_account(record: AccountRecord) -> Account:
    return Account(id=record.id, owner_id=record.owner_id, balance=record.balance)


class SqlAccountRepository(AccountRepository):
    """
    Repository для работы со счетами

    list_by_owner использует индекс ix_accounts_owner_id.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: int) -> Account | None:
        """
        Получить счёт по ID

        Args:
            account_id: ID счёта

        Returns:
            Account или None если не найден
        """
        record = self.db.get(AccountRecord, account_id)
        return to_account(record) if record else None

    def get_for_update(self, account_id: int) -> Account | None:
        """
        SELECT ... FOR UPDATE (SQLite игнорирует блокировку)

        populate_existing: перечитать строку, даже если она уже в identity map.
        """
        record = (
            self.db.query(AccountRecord)
            .filter(AccountRecord.id == account_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        return to_account(record) if record else None

    def save(self, account: Account) -> Account:
        """
        Создать или заменить счёт

        Args:
            account: Счёт с заполненным id

        Returns:
            Сохранённый Account
        """
        if account.id is None:
            raise ValueError("account id is required to save")

        record = self.db.get(AccountRecord, account.id)
        if record is None:
            record = AccountRecord(
                id=account.id,
                owner_id=account.owner_id,
                balance=account.balance
            )
            self.db.add(record)
        else:
            record.owner_id = account.owner_id
            record.balance = account.balance

        self.db.flush()
        return to_account(record)

    def update(self, account: Account) -> Account:
        record = self.db.get(AccountRecord, account.id)
        if record is None:
            raise NotFoundError(f"account {account.id} not found")

        record.owner_id = account.owner_id
        record.balance = account.balance
        self.db.flush()
        return to_account(record)

    def delete(self, account_id: int) -> bool:
        deleted = self.db.query(AccountRecord).filter(
            AccountRecord.id == account_id
        ).delete()
        self.db.flush()
        return deleted > 0

    def list_all(self) -> Iterator[Account]:
        query = self.db.query(AccountRecord).order_by(AccountRecord.id.asc())
        for record in query:
            yield to_account(record)

    def list_by_owner(self, owner_id: int) -> Iterator[Account]:
        query = (
            self.db.query(AccountRecord)
            .filter(AccountRecord.owner_id == owner_id)
            .order_by(AccountRecord.id.asc())
        )
        for record in query:
            yield to_account(record)

    def exists(self, account_id: int) -> bool:
        return self.db.query(
            self.db.query(AccountRecord).filter(AccountRecord.id == account_id).exists()
        ).scalar()

    def next_id(self) -> int:
        """
        Генерировать новый account_id (max+1)
        """
        return (self.db.query(func.max(AccountRecord.id)).scalar() or 0) + 1
