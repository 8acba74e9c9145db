"""
Tests for TransferUseCase
"""
import pytest
from decimal import Decimal
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError

from bankcore.application.events import AuditListener
from bankcore.application.transfers import TransferUseCase
from bankcore.domain.account import Account
from bankcore.domain.events import EventKind
from bankcore.domain.transaction import TransactionType
from bankcore.infrastructure.db.repositories.accounts import SqlAccountRepository


@pytest.fixture
def audit(event_bus):
    listener = AuditListener()
    event_bus.subscribe(listener)
    return listener


@pytest.fixture
def accounts_pair(seed_user, seed_account):
    """Счета {1, owner=10, 500} и {2, owner=20, 100}, оба владельца есть"""
    seed_user(10)
    seed_user(20)
    seed_account(1, 10, "500")
    seed_account(2, 20, "100")


@pytest.fixture
def use_case(db_session, event_bus, account_cache, history, audit):
    return TransferUseCase(db_session, events=event_bus, cache=account_cache, history=history)


def _balance(db_session, account_id):
    return SqlAccountRepository(db_session).get(account_id).balance


def test_happy_transfer(use_case, accounts_pair, db_session, audit, account_cache):
    """Успешный перевод: 500/100 -> 300/300, два события (1, затем 2), кэш сброшен"""
    account_cache.put_if_absent(Account(id=1, owner_id=10, balance=Decimal("500")))
    account_cache.put_if_absent(Account(id=2, owner_id=20, balance=Decimal("100")))

    result = use_case.execute(1, 2, Decimal("200"))

    assert result.success is True
    assert result.transfer_id is not None
    assert result.message == "transfer completed successfully"
    assert _balance(db_session, 1) == Decimal("300")
    assert _balance(db_session, 2) == Decimal("300")

    entries = audit.entries()
    assert [e.kind for e in entries] == [EventKind.BALANCE_CHANGED, EventKind.BALANCE_CHANGED]
    assert [e.attributes["account_id"] for e in entries] == [1, 2]
    assert 1 not in account_cache
    assert 2 not in account_cache


def test_transfer_preserves_sum(use_case, accounts_pair, db_session):
    before = _balance(db_session, 1) + _balance(db_session, 2)

    use_case.execute(1, 2, Decimal("123.45"))
    use_case.execute(2, 1, Decimal("0.45"))

    assert _balance(db_session, 1) + _balance(db_session, 2) == before


def test_transfer_records_history(use_case, accounts_pair, history):
    result = use_case.execute(1, 2, Decimal("50"))

    [outgoing] = history.last_n(1, 5)
    [incoming] = history.last_n(2, 5)
    assert outgoing.type == TransactionType.TRANSFER_OUT
    assert outgoing.amount == Decimal("-50")
    assert incoming.type == TransactionType.TRANSFER_IN
    assert incoming.amount == Decimal("50")
    assert result.transfer_id in outgoing.description


def test_insufficient_funds(use_case, accounts_pair, db_session, audit):
    """Недостаточно средств: success=false, балансы и события без изменений"""
    result = use_case.execute(1, 2, Decimal("1000"))

    assert result.success is False
    assert "insufficient" in result.message
    assert result.transfer_id is None
    assert _balance(db_session, 1) == Decimal("500")
    assert _balance(db_session, 2) == Decimal("100")
    assert audit.entries() == []


def test_self_transfer_does_not_touch_store(db_session, event_bus, account_cache, history):
    """Перевод на тот же счёт отклоняется до чтения из БД"""
    accounts = Mock()
    use_case = TransferUseCase(db_session, accounts=accounts, events=event_bus, cache=account_cache, history=history)

    result = use_case.execute(1, 1, Decimal("50"))

    assert result.success is False
    assert result.message == "cannot transfer to the same account"
    accounts.get.assert_not_called()
    accounts.get_for_update.assert_not_called()


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_non_positive_amount(use_case, accounts_pair, amount):
    result = use_case.execute(1, 2, Decimal(amount))

    assert result.success is False
    assert result.message == "amount must be positive"


def test_amount_over_limit(use_case, accounts_pair):
    """Лимит 10000 на один перевод"""
    result = use_case.execute(1, 2, Decimal("10000.01"))

    assert result.success is False
    assert "10000" in result.message


def test_missing_accounts(use_case, accounts_pair):
    assert use_case.execute(99, 2, Decimal("1")).message == "source account not found"
    assert use_case.execute(1, 99, Decimal("1")).message == "destination account not found"


def test_missing_owner(use_case, seed_user, seed_account):
    seed_user(10)
    seed_account(1, 10, "500")
    seed_account(2, 30, "0")  # владельца 30 нет

    result = use_case.execute(1, 2, Decimal("10"))

    assert result.success is False
    assert result.message == "destination account owner not found"


def test_transfer_entire_balance(use_case, accounts_pair, db_session):
    result = use_case.execute(1, 2, Decimal("500"))

    assert result.success is True
    assert _balance(db_session, 1) == Decimal("0")


def test_failing_second_write_rolls_back_both(db_session, accounts_pair, event_bus, account_cache, history, audit):
    """Падение записи получателя: ни один баланс не меняется, событий нет"""
    real = SqlAccountRepository(db_session)
    accounts = Mock(wraps=real)

    def update(account):
        if account.id == 2:
            raise OperationalError("UPDATE accounts", {}, Exception("disk full"))
        return real.update(account)

    accounts.update.side_effect = update
    use_case = TransferUseCase(db_session, accounts=accounts, events=event_bus, cache=account_cache, history=history)

    result = use_case.execute(1, 2, Decimal("200"))

    assert result.success is False
    assert result.message.startswith("transfer failed:")
    assert _balance(db_session, 1) == Decimal("500")
    assert _balance(db_session, 2) == Decimal("100")
    assert audit.entries() == []
    assert history.size(1) == 0


@pytest.mark.parametrize("amount", ["0.015", "1.115", "0.005"])
def test_sub_cent_amount_rejected(use_case, accounts_pair, db_session, audit, amount):
    """Больше 2 знаков после запятой: отказ, балансы и сумма не меняются"""
    result = use_case.execute(1, 2, Decimal(amount))

    assert result.success is False
    assert result.message == "amount must have at most 2 decimal places"
    assert _balance(db_session, 1) == Decimal("500")
    assert _balance(db_session, 2) == Decimal("100")
    assert audit.entries() == []


def test_amount_normalized_to_two_places(use_case, accounts_pair, db_session, history):
    """100.500 допустимо; в результате, истории и БД одно и то же значение"""
    result = use_case.execute(1, 2, Decimal("100.500"))

    assert result.success is True
    assert str(result.amount) == "100.50"
    assert str(history.last_n(2, 1)[0].amount) == "100.50"
    assert _balance(db_session, 1) + _balance(db_session, 2) == Decimal("600")


def test_rows_locked_in_ascending_id_order(db_session, accounts_pair, event_bus, account_cache, history):
    """Перевод 2 -> 1 блокирует строки в порядке 1, 2"""
    accounts = Mock(wraps=SqlAccountRepository(db_session))
    use_case = TransferUseCase(db_session, accounts=accounts, events=event_bus, cache=account_cache, history=history)

    result = use_case.execute(2, 1, Decimal("10"))

    assert result.success is True
    assert [c.args[0] for c in accounts.get_for_update.call_args_list] == [1, 2]
    accounts.get.assert_not_called()
