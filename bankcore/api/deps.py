"""
FastAPI dependencies (DB session, services)
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from bankcore.infrastructure.db.session import get_db as _get_db
from bankcore.application.accounts import AccountService
from bankcore.application.stats import AccountStatsService
from bankcore.application.transfers import TransferUseCase
from bankcore.application.users import UserService


# Re-export get_db для удобства (и для dependency_overrides в тестах)
get_db = _get_db


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """
    AccountService на текущей сессии (кэш, история и event bus - общие на процесс)
    """
    return AccountService(db)


def get_transfer_use_case(db: Session = Depends(get_db)) -> TransferUseCase:
    return TransferUseCase(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_stats_service(db: Session = Depends(get_db)) -> AccountStatsService:
    return AccountStatsService(db)
