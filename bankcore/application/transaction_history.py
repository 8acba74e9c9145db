"""
Transaction history - bounded per-account FIFO of recent transactions

Не журнал: только последние N операций в памяти процесса.
"""
import threading
from collections import deque
from functools import lru_cache

from bankcore.domain.transaction import Transaction

MAX_HISTORY_SIZE = 100


class TransactionHistory:
    """
    Per-account deque with fixed capacity

    Example:
        >>> history = TransactionHistory()
        >>> history.add(tx)
        >>> history.last_n(tx.account_id, 5)  # most recent first
    """

    def __init__(self, capacity: int = MAX_HISTORY_SIZE):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._histories: dict[int, deque[Transaction]] = {}
        self._lock = threading.Lock()

    def add(self, transaction: Transaction) -> None:
        """Append at the tail; the oldest entry is dropped once capacity is exceeded"""
        with self._lock:
            history = self._histories.get(transaction.account_id)
            if history is None:
                history = deque(maxlen=self.capacity)
                self._histories[transaction.account_id] = history
            history.append(transaction)

    def last_n(self, account_id: int, limit: int) -> list[Transaction]:
        """
        Последние операции счёта

        Args:
            account_id: ID счёта
            limit: Максимум операций

        Returns:
            До min(limit, size) операций, самые свежие первыми
        """
        if limit <= 0:
            return []
        with self._lock:
            history = self._histories.get(account_id)
            if not history:
                return []
            result = []
            for transaction in reversed(history):
                if len(result) >= limit:
                    break
                result.append(transaction)
            return result

    def all(self, account_id: int) -> list[Transaction]:
        """All retained transactions in insertion order"""
        with self._lock:
            return list(self._histories.get(account_id, ()))

    def size(self, account_id: int) -> int:
        with self._lock:
            return len(self._histories.get(account_id, ()))

    def clear(self, account_id: int) -> None:
        with self._lock:
            self._histories.pop(account_id, None)


@lru_cache
def get_transaction_history() -> TransactionHistory:
    """Process-wide transaction history (singleton)"""
    return TransactionHistory()
