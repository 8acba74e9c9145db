"""
Transaction domain entity - record of a successful balance mutation
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"


@dataclass(frozen=True)
class Transaction:
    """
    Transaction (append-only)

    amount signed: negative for WITHDRAWAL / TRANSFER_OUT
    """
    account_id: int
    amount: Decimal
    type: TransactionType
    description: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def for_balance_change(account_id: int, old_balance: Decimal, new_balance: Decimal) -> "Transaction":
        """
        DEPOSIT or WITHDRAWAL for a direct balance update

        Args:
            account_id: ID счёта
            old_balance: Баланс до изменения
            new_balance: Баланс после изменения

        Returns:
            Transaction with signed delta
        """
        delta = new_balance - old_balance
        kind = TransactionType.DEPOSIT if delta >= 0 else TransactionType.WITHDRAWAL
        return Transaction(
            account_id=account_id,
            amount=delta,
            type=kind,
            description=f"balance set from {old_balance} to {new_balance}"
        )

    @staticmethod
    def transfer_pair(
        transfer_id: str,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal
    ) -> tuple["Transaction", "Transaction"]:
        """TRANSFER_OUT for the source and TRANSFER_IN for the destination"""
        outgoing = Transaction(
            account_id=from_account_id,
            amount=-amount,
            type=TransactionType.TRANSFER_OUT,
            description=f"transfer {transfer_id} to account {to_account_id}"
        )
        incoming = Transaction(
            account_id=to_account_id,
            amount=amount,
            type=TransactionType.TRANSFER_IN,
            description=f"transfer {transfer_id} from account {from_account_id}"
        )
        return outgoing, incoming
