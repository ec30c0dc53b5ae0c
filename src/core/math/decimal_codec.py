"""
Decimal Codec — граница между interchange-форматом и арифметикой

Модуль изолирует арифметическое ядро от конкретного формата хранения decimal:
- Interchange-формат: BSON decimal128 (bson.decimal128.Decimal128 из pymongo)
- decompose: Decimal128 → (coefficient, exponent), value = coefficient × 10^exponent
- encode: (coefficient, exponent) → Decimal128 без промежуточного округления
- parse_decimal: текст → Decimal128
- ZERO: каноническое нулевое значение (decode строки "0")

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. encode(*decompose(v)) == v для любого конечного v, созданного кодеком
2. NaN/Infinity никогда не попадают в арифметику (DecodeError)
3. encode никогда не округляет молча: невыразимый результат → EncodeOverflow
4. Исключения decimal/bson транслируются в иерархию DecimalArithmeticError
"""

import decimal
from decimal import Decimal
from typing import Final, NamedTuple

from bson.decimal128 import Decimal128

# Interchange-тип значения
DecimalValue = Decimal128

# Максимальное число значащих цифр coefficient в decimal128
DECIMAL128_MAX_DIGITS: Final[int] = 34


# =============================================================================
# EXCEPTIONS
# =============================================================================


class DecimalArithmeticError(ArithmeticError):
    """Базовое исключение decimal-ядра."""


class DecodeError(DecimalArithmeticError):
    """
    Значение невозможно разложить на (coefficient, exponent).

    Всегда пробрасывается вызывающему коду, никогда не подменяется нулём.
    """


class EncodeOverflow(DecimalArithmeticError):
    """Результат невыразим в decimal128 (слишком много цифр или exponent вне формата)."""


# =============================================================================
# DECOMPOSITION
# =============================================================================


class Decomposition(NamedTuple):
    """Разложение decimal: value = coefficient × 10^exponent."""

    coefficient: int
    exponent: int


def decompose(value: DecimalValue) -> Decomposition:
    """
    Разложение Decimal128 на целый coefficient и exponent.

    Представление сохраняется как есть: "1.50" → (150, -2), "1.5" → (15, -1).

    Args:
        value: Значение в interchange-формате

    Returns:
        Decomposition(coefficient, exponent)

    Raises:
        DecodeError: если value не Decimal128 или не конечное (NaN/Infinity)

    Examples:
        >>> decompose(Decimal128("1.50"))
        Decomposition(coefficient=150, exponent=-2)
        >>> decompose(Decimal128("-5E+3"))
        Decomposition(coefficient=-5, exponent=3)
    """
    if not isinstance(value, Decimal128):
        raise DecodeError(f"Expected Decimal128, got {type(value).__name__}")

    dec = value.to_decimal()
    if not dec.is_finite():
        raise DecodeError(f"Cannot decompose non-finite decimal: {dec}")

    sign, digits, exponent = dec.as_tuple()
    coefficient = int("".join(str(d) for d in digits))
    if sign:
        coefficient = -coefficient

    return Decomposition(coefficient=coefficient, exponent=exponent)


def encode(coefficient: int, exponent: int) -> DecimalValue:
    """
    Сборка Decimal128 из coefficient и exponent.

    Decimal строится из digit tuple напрямую, поэтому контекст по умолчанию
    (prec=28) не участвует. Округление выполняет только контекст decimal128,
    и любое неточное округление трактуется как переполнение.

    Args:
        coefficient: Целый coefficient (произвольной точности)
        exponent: Десятичный exponent

    Returns:
        Decimal128, численно равный coefficient × 10^exponent

    Raises:
        EncodeOverflow: если значение невыразимо в decimal128
    """
    sign = 1 if coefficient < 0 else 0
    try:
        digits = tuple(int(ch) for ch in str(abs(coefficient)))
        return Decimal128(Decimal((sign, digits, exponent)))
    except (decimal.DecimalException, ValueError) as exc:
        raise EncodeOverflow(
            f"Magnitude too large for decimal128: "
            f"coefficient bit_length={coefficient.bit_length()}, exponent={exponent}"
        ) from exc


def parse_decimal(text: str) -> DecimalValue:
    """
    Decode текстового представления в Decimal128.

    Args:
        text: Строка вида "1.23", "-0.05", "5E+3", "NaN"

    Returns:
        Decimal128

    Raises:
        DecodeError: если строка некорректна или требует округления
            (больше DECIMAL128_MAX_DIGITS значащих цифр)
    """
    try:
        return Decimal128(text)
    except (decimal.DecimalException, TypeError, ValueError) as exc:
        raise DecodeError(f"Cannot parse decimal128 from {text!r}") from exc


def is_zero(value: DecimalValue) -> bool:
    """True если значение численно равно нулю (при любом exponent)."""
    return decompose(value).coefficient == 0


# Каноническое нулевое значение, read-only после импорта
ZERO: Final[DecimalValue] = parse_decimal("0")
