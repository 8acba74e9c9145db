"""
TransferResult - outcome of a transfer between two accounts
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

TRANSFER_SUCCESS_MESSAGE = "transfer completed successfully"


@dataclass(frozen=True)
class TransferResult:
    """
    success=True  => both sides persisted, transfer_id set
    success=False => neither side changed, message explains why
    """
    from_account_id: int
    to_account_id: int
    amount: Decimal
    success: bool
    message: str
    transfer_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def ok(transfer_id: str, from_account_id: int, to_account_id: int, amount: Decimal) -> "TransferResult":
        return TransferResult(
            transfer_id=transfer_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            success=True,
            message=TRANSFER_SUCCESS_MESSAGE
        )

    @staticmethod
    def failure(from_account_id: int, to_account_id: int, amount: Decimal, reason: str) -> "TransferResult":
        return TransferResult(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            success=False,
            message=reason
        )
