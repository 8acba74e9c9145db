"""
Tests for AccountService
"""
import pytest
from decimal import Decimal
from unittest.mock import Mock
from sqlalchemy.exc import IntegrityError, OperationalError

from bankcore.application.accounts import AccountService
from bankcore.application.events import AuditListener
from bankcore.domain.account import Account
from bankcore.domain.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
    SystemFailureError,
)
from bankcore.domain.events import EventKind
from bankcore.domain.repositories import AccountRepository
from bankcore.infrastructure.db.repositories.accounts import SqlAccountRepository
from bankcore.domain.transaction import TransactionType
from bankcore.infrastructure.db.models import AccountRecord


@pytest.fixture
def audit(event_bus):
    listener = AuditListener()
    event_bus.subscribe(listener)
    return listener


@pytest.fixture
def service(db_session, event_bus, account_cache, history, audit):
    return AccountService(db_session, events=event_bus, cache=account_cache, history=history)


def test_create_account_assigns_next_id(service, seed_user, audit):
    """Создание счёта без id - выдаётся следующий"""
    seed_user(10)

    first = service.create(Account(id=None, owner_id=10, balance=Decimal("100")))
    second = service.create(Account(id=None, owner_id=10, balance=Decimal("0")))

    assert first.id == 1
    assert second.id == 2
    assert service.get_by_id(1).balance == Decimal("100")
    assert [e.kind for e in audit.entries()] == [EventKind.ACCOUNT_CREATED, EventKind.ACCOUNT_CREATED]


def test_create_with_explicit_id(service, seed_user):
    seed_user(10)

    account = service.create(Account(id=42, owner_id=10, balance=Decimal("5.50")))

    assert account.id == 42
    assert service.exists(42)


def test_create_with_bad_owner_id_is_invalid(service, audit):
    """ownerId=0 -> InvalidArgument, в списке ошибок есть сообщение про владельца"""
    with pytest.raises(InvalidArgumentError) as exc_info:
        service.create(Account(id=None, owner_id=0, balance=Decimal("50")))

    assert "account must have a valid owner id" in exc_info.value.errors
    assert audit.entries() == []


def test_create_with_negative_balance_is_invalid(service, seed_user):
    seed_user(10)

    with pytest.raises(InvalidArgumentError, match="balance cannot be less than 0"):
        service.create(Account(id=1, owner_id=10, balance=Decimal("-1")))

    assert not service.exists(1)


def test_create_with_unknown_owner_fails_precondition(service, audit):
    """Владельца нет в UserRepository"""
    with pytest.raises(PreconditionFailedError):
        service.create(Account(id=1, owner_id=999, balance=Decimal("10")))

    assert not service.exists(1)
    assert audit.entries() == []


def test_create_duplicate_id_conflicts(service, seed_user):
    seed_user(10)
    service.create(Account(id=1, owner_id=10, balance=Decimal("10")))

    with pytest.raises(ConflictError):
        service.create(Account(id=1, owner_id=10, balance=Decimal("20")))

    assert service.get_by_id(1).balance == Decimal("10")


def test_get_missing_account(service):
    with pytest.raises(NotFoundError):
        service.get_by_id(123)


def test_list_by_owner_and_all(service, seed_user, seed_account):
    seed_user(10)
    seed_user(20)
    seed_account(1, 10, "1")
    seed_account(2, 20, "2")
    seed_account(3, 10, "3")

    assert [a.id for a in service.list_by_owner(10)] == [1, 3]
    assert [a.id for a in service.list_by_owner(30)] == []
    assert [a.id for a in service.list_all()] == [1, 2, 3]


def test_update_balance_records_history_and_event(service, seed_account, history, audit):
    """Пополнение -> DEPOSIT в истории и событие BalanceChanged"""
    seed_account(1, 10, "100")

    updated = service.update_balance(1, Decimal("175"))

    assert updated.balance == Decimal("175")
    assert service.get_by_id(1).balance == Decimal("175")
    [tx] = history.last_n(1, 10)
    assert tx.type == TransactionType.DEPOSIT
    assert tx.amount == Decimal("75")
    assert audit.entries()[-1].kind == EventKind.BALANCE_CHANGED


def test_update_balance_invalidates_cache(service, seed_account, account_cache):
    """После update кэш отдаёт новый баланс"""
    seed_account(1, 10, "100")
    assert service.find_cached(1).balance == Decimal("100")

    service.update_balance(1, Decimal("40"))

    assert 1 not in account_cache
    assert service.find_cached(1).balance == Decimal("40")


def test_update_balance_same_value_skips_history(service, seed_account, history, audit):
    """Повторный update тем же значением: событие есть, новой записи в истории нет"""
    seed_account(1, 10, "100")

    service.update_balance(1, Decimal("50"))
    service.update_balance(1, Decimal("50"))

    assert history.size(1) == 1
    assert [e.kind for e in audit.entries()] == [EventKind.BALANCE_CHANGED, EventKind.BALANCE_CHANGED]


def test_update_balance_negative_rejected(service, seed_account):
    seed_account(1, 10, "100")

    with pytest.raises(InvalidArgumentError):
        service.update_balance(1, Decimal("-0.01"))

    assert service.get_by_id(1).balance == Decimal("100")


def test_update_balance_missing_account(service):
    with pytest.raises(NotFoundError):
        service.update_balance(5, Decimal("1"))


def test_delete_with_positive_balance_fails(service, seed_account):
    """Удаление счёта с балансом > 0 запрещено, счёт остаётся"""
    seed_account(1, 10, "300")

    with pytest.raises(PreconditionFailedError, match="positive balance"):
        service.delete(1)

    assert service.get_by_id(1).balance == Decimal("300")


def test_delete_zero_balance(service, seed_account, history, audit, db_session):
    seed_account(1, 10, "10")
    service.update_balance(1, Decimal("0"))

    service.delete(1)

    assert db_session.get(AccountRecord, 1) is None
    assert history.size(1) == 0
    assert audit.entries()[-1].kind == EventKind.ACCOUNT_DELETED


def test_delete_missing_account(service):
    with pytest.raises(NotFoundError):
        service.delete(77)


def test_category_of(service, seed_account):
    seed_account(1, 10, "3500")
    seed_account(2, 10, "1500")

    assert service.category_of(1).name == "PremiumPlus"
    assert service.category_of(2).name == "Premium"


def test_recent_transactions(service, seed_account):
    seed_account(1, 10, "0")
    service.update_balance(1, Decimal("10"))
    service.update_balance(1, Decimal("4"))

    recent = service.recent_transactions(1, limit=10)

    assert [t.type for t in recent] == [TransactionType.WITHDRAWAL, TransactionType.DEPOSIT]
    with pytest.raises(NotFoundError):
        service.recent_transactions(99)


def test_store_failure_becomes_system_failure(db_session, event_bus, account_cache, history):
    """Ошибка SQLAlchemy -> SystemFailureError"""
    accounts = Mock(spec=AccountRepository)
    accounts.get.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))
    service = AccountService(db_session, accounts=accounts, events=event_bus, cache=account_cache, history=history)

    with pytest.raises(SystemFailureError, match="read account failed"):
        service.get_by_id(1)


def test_update_balance_rejects_sub_cent_value(service, seed_account, history):
    """12.345 не помещается в NUMERIC(20,2): отказ, в БД старое значение"""
    seed_account(1, 10, "100")

    with pytest.raises(InvalidArgumentError, match="at most 2 decimal places"):
        service.update_balance(1, Decimal("12.345"))

    assert service.get_by_id(1).balance == Decimal("100")
    assert history.size(1) == 0


def test_update_balance_returns_stored_scale(service, seed_account, history):
    """Ответ, история и БД совпадают: 12.3 -> 12.30"""
    seed_account(1, 10, "100")

    updated = service.update_balance(1, Decimal("12.3"))

    assert str(updated.balance) == "12.30"
    assert str(history.last_n(1, 1)[0].amount) == "-87.70"
    assert service.get_by_id(1).balance == updated.balance


def test_create_rejects_sub_cent_balance(service, seed_user):
    seed_user(10)

    with pytest.raises(InvalidArgumentError, match="at most 2 decimal places"):
        service.create(Account(id=1, owner_id=10, balance=Decimal("10.001")))

    assert not service.exists(1)


def test_concurrent_insert_becomes_conflict(db_session, seed_user, event_bus, account_cache, history):
    """Другой запрос вставил тот же id между exists() и commit -> ConflictError, не SystemFailure"""
    seed_user(10)
    accounts = Mock(wraps=SqlAccountRepository(db_session))
    accounts.exists.return_value = False
    accounts.save.side_effect = IntegrityError("INSERT INTO accounts", {}, Exception("UNIQUE constraint failed"))
    service = AccountService(db_session, accounts=accounts, events=event_bus, cache=account_cache, history=history)

    with pytest.raises(ConflictError, match="account 1 already exists"):
        service.create(Account(id=1, owner_id=10, balance=Decimal("10")))
