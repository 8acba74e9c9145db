"""
Account event bus - synchronous in-process publish/subscribe

Доставка синхронная, в порядке подписки, до возврата из publish().
Исключение в listener'е логируется и не мешает остальным (best-effort, без retry).
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from functools import lru_cache
from typing import Any

from bankcore.domain.account import Account
from bankcore.domain.events import (
    AccountCreated,
    AccountDeleted,
    AccountEvent,
    BalanceChanged,
    EventKind,
)

logger = logging.getLogger(__name__)

# Порог "значительного" изменения баланса для NotificationListener
SIGNIFICANT_CHANGE_THRESHOLD = Decimal("1000")


class AccountEventListener(ABC):
    """Observer of account events"""

    @abstractmethod
    def on_account_created(self, account: Account) -> None:
        pass

    @abstractmethod
    def on_balance_changed(self, account: Account, old_balance: Decimal, new_balance: Decimal) -> None:
        pass

    @abstractmethod
    def on_account_deleted(self, account_id: int) -> None:
        pass

    def handle(self, event: AccountEvent) -> None:
        """Dispatch an event record to the matching callback"""
        if isinstance(event, AccountCreated):
            self.on_account_created(event.account)
        elif isinstance(event, BalanceChanged):
            self.on_balance_changed(event.account, event.old_balance, event.new_balance)
        elif isinstance(event, AccountDeleted):
            self.on_account_deleted(event.account_id)
        else:
            raise TypeError(f"unknown account event: {event!r}")


class AccountEventBus:
    """
    Process-wide list of listeners

    Example:
        >>> bus = AccountEventBus()
        >>> bus.subscribe(NotificationListener())
        >>> bus.publish(AccountDeleted(account_id=7))
    """

    def __init__(self):
        self._listeners: list[AccountEventListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: AccountEventListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: AccountEventListener) -> None:
        """Remove the first registration of listener; no error if absent"""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def listeners(self) -> list[AccountEventListener]:
        with self._lock:
            return list(self._listeners)

    def publish(self, event: AccountEvent) -> int:
        """
        Deliver event to every listener in subscription order

        Returns:
            Количество listener'ов, обработавших событие без ошибки
        """
        delivered = 0
        for listener in self.listeners():
            try:
                listener.handle(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "Listener %s failed on %s", type(listener).__name__, event.kind.value
                )
        return delivered


class NotificationListener(AccountEventListener):
    """Human-readable log line per event, warning on large balance changes"""

    def on_account_created(self, account: Account) -> None:
        logger.info(
            "NOTIFICATION: account %s created for owner %s with balance %s",
            account.id, account.owner_id, account.balance
        )

    def on_balance_changed(self, account: Account, old_balance: Decimal, new_balance: Decimal) -> None:
        logger.info(
            "NOTIFICATION: balance of account %s changed from %s to %s",
            account.id, old_balance, new_balance
        )
        change = abs(new_balance - old_balance)
        if change > SIGNIFICANT_CHANGE_THRESHOLD:
            logger.warning(
                "ALERT: significant balance change on account %s: %s", account.id, change
            )

    def on_account_deleted(self, account_id: int) -> None:
        logger.info("NOTIFICATION: account %s deleted", account_id)


@dataclass(frozen=True)
class AuditEntry:
    kind: EventKind
    attributes: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def format(self) -> str:
        attrs = ", ".join(f"{key}={value}" for key, value in self.attributes.items())
        return f"[{self.timestamp.isoformat()}] {self.kind.value} - {attrs}"


class AuditListener(AccountEventListener):
    """In-memory append-only audit log"""

    def __init__(self):
        self._entries: list[AuditEntry] = []
        self._lock = threading.Lock()

    def _append(self, entry: AuditEntry) -> None:
        with self._lock:
            self._entries.append(entry)
        logger.info("AUDIT: %s", entry.format())

    def on_account_created(self, account: Account) -> None:
        self._append(AuditEntry(
            kind=EventKind.ACCOUNT_CREATED,
            attributes={"account_id": account.id, "owner_id": account.owner_id, "balance": account.balance}
        ))

    def on_balance_changed(self, account: Account, old_balance: Decimal, new_balance: Decimal) -> None:
        self._append(AuditEntry(
            kind=EventKind.BALANCE_CHANGED,
            attributes={"account_id": account.id, "old_balance": old_balance, "new_balance": new_balance}
        ))

    def on_account_deleted(self, account_id: int) -> None:
        self._append(AuditEntry(
            kind=EventKind.ACCOUNT_DELETED,
            attributes={"account_id": account_id}
        ))

    def entries(self) -> list[AuditEntry]:
        """Snapshot (copy) of the log"""
        with self._lock:
            return list(self._entries)

    def formatted_log(self) -> list[str]:
        return [entry.format() for entry in self.entries()]


@lru_cache
def get_event_bus() -> AccountEventBus:
    """Process-wide event bus (singleton)"""
    return AccountEventBus()


def register_default_listeners(bus: AccountEventBus) -> None:
    """
    Notification -> Audit, once per bus

    Повторный вызов (например, при повторном create_app) ничего не добавляет.
    """
    registered = {type(listener) for listener in bus.listeners()}
    for listener_cls in (NotificationListener, AuditListener):
        if listener_cls not in registered:
            bus.subscribe(listener_cls())
            logger.info("%s registered", listener_cls.__name__)
    logger.info("Active account event listeners: %d", bus.subscriber_count())
