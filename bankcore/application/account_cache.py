"""
Account cache (read-through over AccountRepository) and in-memory search helpers
"""
import logging
import threading
from functools import lru_cache

from bankcore.domain.account import Account
from bankcore.domain.repositories import AccountRepository

logger = logging.getLogger(__name__)


class AccountCache:
    """
    Thread-safe id -> Account map

    Кэш не подписан на события: после изменения счёта вызывающий код
    обязан сделать invalidate(id).

    Поколения: invalidate(id) увеличивает счётчик id, clear() - общую эпоху.
    Значение, прочитанное из БД до invalidate, не попадает в кэш после него
    (см. generation() / put_if_current()).
    """

    def __init__(self):
        self._accounts: dict[int, Account] = {}
        self._generations: dict[int, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def get(self, account_id: int) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def put_if_absent(self, account: Account) -> Account:
        """Store unless another request cached this id first; returns the cached value"""
        with self._lock:
            return self._accounts.setdefault(account.id, account)

    def generation(self, account_id: int) -> tuple[int, int]:
        """Token to pass to put_if_current(); taken before reading the store"""
        with self._lock:
            return self._epoch, self._generations.get(account_id, 0)

    def put_if_current(self, account: Account, generation: tuple[int, int]) -> Account:
        """
        put_if_absent(), но только если с момента generation() не было invalidate/clear

        Returns:
            Значение из кэша, либо account без сохранения (если он устарел)
        """
        with self._lock:
            if (self._epoch, self._generations.get(account.id, 0)) != generation:
                return account
            return self._accounts.setdefault(account.id, account)

    def invalidate(self, account_id: int) -> None:
        with self._lock:
            self._accounts.pop(account_id, None)
            self._generations[account_id] = self._generations.get(account_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()
            self._generations.clear()
            self._epoch += 1

    def __contains__(self, account_id: int) -> bool:
        with self._lock:
            return account_id in self._accounts

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)


@lru_cache
def get_account_cache() -> AccountCache:
    """Process-wide account cache (singleton)"""
    return AccountCache()


class AccountSearchService:
    """Cached lookups plus search/sort helpers over already loaded accounts"""

    def __init__(self, repository: AccountRepository, cache: AccountCache | None = None):
        self.repository = repository
        self.cache = cache if cache is not None else get_account_cache()

    def find_by_id_with_cache(self, account_id: int) -> Account | None:
        """
        Счёт из кэша, иначе из репозитория (с сохранением в кэш)

        Not-found is never cached.
        """
        cached = self.cache.get(account_id)
        if cached is not None:
            return cached

        generation = self.cache.generation(account_id)
        account = self.repository.get(account_id)
        if account is None:
            return None
        return self.cache.put_if_current(account, generation)

    def invalidate_cache(self, account_id: int) -> None:
        self.cache.invalidate(account_id)

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Account cache cleared")

    @staticmethod
    def binary_search_by_id(sorted_accounts: list[Account], account_id: int) -> Account | None:
        """
        Binary search over accounts sorted by id ascending

        Returns:
            Account или None если не найден
        """
        left, right = 0, len(sorted_accounts) - 1
        while left <= right:
            mid = (left + right) // 2
            mid_id = sorted_accounts[mid].id
            if mid_id == account_id:
                return sorted_accounts[mid]
            if mid_id < account_id:
                left = mid + 1
            else:
                right = mid - 1
        return None

    @staticmethod
    def sort_accounts_by_balance(accounts: list[Account]) -> list[Account]:
        """Highest balance first (stable for equal balances)"""
        return sorted(accounts, key=lambda a: a.balance, reverse=True)

    @staticmethod
    def linear_search_by_owner(accounts: list[Account], owner_id: int) -> Account | None:
        """First account of the owner, in list order"""
        return next((a for a in accounts if a.owner_id == owner_id), None)
