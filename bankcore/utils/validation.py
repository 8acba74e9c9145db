"""
Validation utilities for money amounts
"""
from decimal import Decimal, InvalidOperation

# Совпадает с масштабом колонки accounts.balance (NUMERIC(20,2))
MAX_DECIMAL_PLACES = 2


def validate_decimal_amount(value: Decimal, max_decimal_places: int = MAX_DECIMAL_PLACES) -> tuple[bool, str | None]:
    """
    Валидация денежной суммы

    Args:
        value: Сумма
        max_decimal_places: Максимум знаков после запятой (по умолчанию 2)

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount(Decimal("100.50"))
        (True, None)
        >>> validate_decimal_amount(Decimal("100.505"))
        (False, "amount must have at most 2 decimal places")
    """
    if not value.is_finite():
        return False, "amount must be a finite number"

    try:
        quantized = value.quantize(Decimal(1).scaleb(-max_decimal_places))
    except InvalidOperation:
        return False, "amount is too large"

    # 100.500 допустимо, 100.505 - нет
    if quantized != value:
        return False, f"amount must have at most {max_decimal_places} decimal places"

    return True, None


def validate_and_normalize_amount(value: Decimal, max_decimal_places: int = MAX_DECIMAL_PLACES) -> Decimal:
    """
    Валидировать и нормализовать сумму (raise exception при ошибке)

    Returns:
        Сумма ровно с max_decimal_places знаками (Decimal("5") -> Decimal("5.00"))

    Raises:
        ValueError: если валидация не прошла
    """
    is_valid, error = validate_decimal_amount(value, max_decimal_places)
    if not is_valid:
        raise ValueError(error)

    return value.quantize(Decimal(1).scaleb(-max_decimal_places))
