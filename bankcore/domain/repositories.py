"""
Repository contracts consumed by the application layer

Реализации делают flush(), но не commit(): границы транзакции
определяет сервис, который вызывает репозиторий.
"""
from abc import ABC, abstractmethod
from typing import Iterator

from bankcore.domain.account import Account
from bankcore.domain.user import User


class AccountRepository(ABC):

    @abstractmethod
    def get(self, account_id: int) -> Account | None:
        """Account or None if not found"""
        pass

    @abstractmethod
    def get_for_update(self, account_id: int) -> Account | None:
        """
        Like get(), but locks the row until the current transaction ends

        Вызывающий код берёт блокировки в порядке возрастания id.
        """
        pass

    @abstractmethod
    def save(self, account: Account) -> Account:
        """Create or replace (account.id required)"""
        pass

    @abstractmethod
    def update(self, account: Account) -> Account:
        """
        Replace an existing account

        Raises:
            NotFoundError: если счёта нет
        """
        pass

    @abstractmethod
    def delete(self, account_id: int) -> bool:
        """True if deleted, False if there was nothing to delete"""
        pass

    @abstractmethod
    def list_all(self) -> Iterator[Account]:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> Iterator[Account]:
        pass

    @abstractmethod
    def exists(self, account_id: int) -> bool:
        pass

    @abstractmethod
    def next_id(self) -> int:
        """Next free id (max + 1)"""
        pass


class UserRepository(ABC):

    @abstractmethod
    def get(self, user_id: int) -> User | None:
        pass

    @abstractmethod
    def register(self, user: User) -> User:
        """Persist a new user (user.id required)"""
        pass

    @abstractmethod
    def exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def next_id(self) -> int:
        pass
