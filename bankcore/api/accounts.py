"""
Account API endpoints
"""
import logging
from datetime import datetime
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from bankcore.api.deps import (
    get_account_service,
    get_stats_service,
    get_transfer_use_case,
)
from bankcore.application.accounts import AccountService
from bankcore.application.stats import AccountStatsService
from bankcore.application.transfers import TransferUseCase
from bankcore.domain.account import Account
from bankcore.domain.category import AccountCategory
from bankcore.domain.errors import InvalidArgumentError
from bankcore.domain.transaction import Transaction
from bankcore.domain.transfer import TransferResult
from bankcore.utils.validation import validate_and_normalize_amount

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


# === Request/Response models ===

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateAccountRequest(CamelModel):
    id: int | None = None
    owner_id: int | None = None
    balance: Decimal | None = None

    @field_validator("balance")
    @classmethod
    def validate_balance(cls, v: Decimal | None) -> Decimal | None:
        """Макс 2 знака после запятой (масштаб колонки balance)"""
        if v is None:
            return v
        return validate_and_normalize_amount(v)


class TransferRequest(CamelModel):
    from_account_id: int
    to_account_id: int
    amount: Decimal

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Макс 2 знака после запятой"""
        return validate_and_normalize_amount(v)


class AccountResponse(CamelModel):
    id: int
    owner_id: int
    balance: str  # Decimal as string


class TransferResponse(CamelModel):
    transfer_id: str | None
    from_account_id: int
    to_account_id: int
    amount: str
    success: bool
    message: str
    timestamp: datetime


class TransactionResponse(CamelModel):
    id: str
    account_id: int
    amount: str
    type: str
    timestamp: datetime
    description: str


class CategoryResponse(CamelModel):
    name: str
    min_balance: str
    max_balance: str  # "Infinity" для открытого диапазона


class TotalBalanceResponse(CamelModel):
    total_balance: str
    total_accounts: int


class AccountSummaryResponse(CamelModel):
    owner_id: int
    total_balance: str
    average_balance: str
    min_balance: str
    max_balance: str
    account_count: int


class BalanceRangesResponse(CamelModel):
    low: int
    medium: int
    high: int
    total: int


# === Helper functions ===

def _to_response(account: Account) -> AccountResponse:
    return AccountResponse(id=account.id, owner_id=account.owner_id, balance=str(account.balance))


def _to_transfer_response(result: TransferResult) -> TransferResponse:
    return TransferResponse(
        transfer_id=result.transfer_id,
        from_account_id=result.from_account_id,
        to_account_id=result.to_account_id,
        amount=str(result.amount),
        success=result.success,
        message=result.message,
        timestamp=result.timestamp
    )


def _to_transaction_response(tx: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=tx.id,
        account_id=tx.account_id,
        amount=str(tx.amount),
        type=tx.type.value,
        timestamp=tx.timestamp,
        description=tx.description
    )


# === Endpoints ===
# Порядок важен: статические пути (/stats/..., /transfer, /cache/clear) объявлены до /{account_id}

@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    req: CreateAccountRequest,
    service: AccountService = Depends(get_account_service)
):
    """Создать счёт"""
    logger.info("Creating account: %s", req)
    account = service.create(Account(id=req.id, owner_id=req.owner_id, balance=req.balance))
    return _to_response(account)


@router.get("", response_model=list[AccountResponse])
def list_accounts(service: AccountService = Depends(get_account_service)):
    """Список всех счетов"""
    return [_to_response(a) for a in service.list_all()]


@router.post("/transfer", response_model=TransferResponse)
def transfer(
    req: TransferRequest,
    use_case: TransferUseCase = Depends(get_transfer_use_case)
):
    """Перевод между счетами (ошибки бизнес-правил - success=false, HTTP 200)"""
    logger.info("Processing transfer: %s", req)
    result = use_case.execute(req.from_account_id, req.to_account_id, req.amount)
    return _to_transfer_response(result)


@router.post("/cache/clear")
def clear_cache(service: AccountService = Depends(get_account_service)):
    """Очистить кэш счетов"""
    service.cache.clear()
    logger.info("Account cache cleared")
    return {"status": "cleared"}


@router.get("/owner/{owner_id}", response_model=list[AccountResponse])
def list_accounts_by_owner(
    owner_id: int,
    service: AccountService = Depends(get_account_service)
):
    """Счета владельца"""
    return [_to_response(a) for a in service.list_by_owner(owner_id)]


@router.get("/stats/total", response_model=TotalBalanceResponse)
def total_balance(stats: AccountStatsService = Depends(get_stats_service)):
    """Сумма балансов и количество счетов"""
    total = stats.total_balance()
    return TotalBalanceResponse(total_balance=str(total.total_balance), total_accounts=total.total_accounts)


@router.get("/stats/owner/{owner_id}", response_model=AccountSummaryResponse)
def owner_summary(
    owner_id: int,
    stats: AccountStatsService = Depends(get_stats_service)
):
    """Сводка по счетам владельца"""
    summary = stats.summary_for_owner(owner_id)
    return AccountSummaryResponse(
        owner_id=summary.owner_id,
        total_balance=str(summary.total_balance),
        average_balance=str(summary.average_balance),
        min_balance=str(summary.min_balance),
        max_balance=str(summary.max_balance),
        account_count=summary.account_count
    )


@router.get("/stats/top", response_model=list[AccountResponse])
def top_accounts(
    limit: int = 10,
    stats: AccountStatsService = Depends(get_stats_service)
):
    """Топ счетов по балансу"""
    return [_to_response(a) for a in stats.top_accounts(limit)]


@router.get("/stats/ranges", response_model=BalanceRangesResponse)
def balance_ranges(stats: AccountStatsService = Depends(get_stats_service)):
    """Количество счетов по диапазонам баланса"""
    counts = stats.balance_ranges()
    return BalanceRangesResponse(low=counts.low, medium=counts.medium, high=counts.high, total=counts.total)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    service: AccountService = Depends(get_account_service)
):
    """Счёт по ID"""
    return _to_response(service.get_by_id(account_id))


@router.get("/{account_id}/cached", response_model=AccountResponse)
def get_account_cached(
    account_id: int,
    service: AccountService = Depends(get_account_service)
):
    """Счёт по ID через кэш"""
    return _to_response(service.find_cached(account_id))


@router.put("/{account_id}/balance", response_model=AccountResponse)
def update_balance(
    account_id: int,
    new_balance: Decimal = Query(..., alias="newBalance"),
    service: AccountService = Depends(get_account_service)
):
    """Установить баланс счёта"""
    try:
        new_balance = validate_and_normalize_amount(new_balance)
    except ValueError as e:
        raise InvalidArgumentError(str(e))
    logger.info("Updating balance for account %s: %s", account_id, new_balance)
    return _to_response(service.update_balance(account_id, new_balance))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    service: AccountService = Depends(get_account_service)
):
    """Удалить счёт (только с нулевым балансом)"""
    logger.info("Deleting account: %s", account_id)
    service.delete(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{account_id}/transactions", response_model=list[TransactionResponse])
def recent_transactions(
    account_id: int,
    limit: int = Query(10, ge=1, le=100),
    service: AccountService = Depends(get_account_service)
):
    """Последние операции по счёту (самые свежие первыми)"""
    return [_to_transaction_response(tx) for tx in service.recent_transactions(account_id, limit)]


@router.get("/{account_id}/category", response_model=CategoryResponse | None)
def account_category(
    account_id: int,
    service: AccountService = Depends(get_account_service)
):
    """Категория счёта по балансу"""
    category: AccountCategory | None = service.category_of(account_id)
    if category is None:
        return None
    return CategoryResponse(
        name=category.name,
        min_balance=str(category.min_balance),
        max_balance=str(category.max_balance)
    )
