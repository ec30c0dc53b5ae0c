"""
Decimal Arithmetic — точная fixed-point арифметика над decimal128

Модуль реализует арифметику без потери точности для денежных расчётов:
- Add / Subtract с выравниванием exponent по более мелкому масштабу
- Multiply: произведение coefficient, сумма exponent
- Round к произвольной единице округления (up/down) через остаток
- Compare с учётом знака и разных exponent без построения огромного
  общего coefficient

Все промежуточные величины — Python int (произвольная точность).
Входные значения никогда не изменяются, каждая операция строит новый Decimal128.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Exponent операндов Add/Subtract/Multiply/Round ∈ [EXPONENT_MIN, EXPONENT_MAX],
   иначе OutOfRange до начала вычислений
2. Результат Add/Subtract сохраняет более мелкий масштаб (min exponent)
3. Ошибка декодирования операнда всегда пробрасывается (DecodeError)
4. Невыразимый результат обрабатывается по OverflowPolicy:
   RAISE → EncodeOverflow, ZERO_FALLBACK → ZERO + warning в лог
5. Compare антисимметричен: compare(a, b) == -compare(b, a)
"""

from enum import Enum, IntEnum
from typing import Final

import structlog
from pydantic import BaseModel, Field, model_validator

from src.core.math.decimal_codec import (
    ZERO,
    DecimalValue,
    DecimalArithmeticError,
    Decomposition,
    EncodeOverflow,
    decompose,
    encode,
)

logger = structlog.get_logger(__name__)

# =============================================================================
# ДИАПАЗОН EXPONENT
# =============================================================================

# Нижняя граница exponent операнда (включительно)
EXPONENT_MIN: Final[int] = -323

# Верхняя граница exponent операнда (включительно)
EXPONENT_MAX: Final[int] = 308


# =============================================================================
# EXCEPTIONS
# =============================================================================


class OutOfRange(DecimalArithmeticError, ValueError):
    """Exponent операнда вне допустимого диапазона [EXPONENT_MIN, EXPONENT_MAX]."""


# =============================================================================
# ENUMS
# =============================================================================


class RoundingDirection(str, Enum):
    """Направление округления к границе единицы округления"""

    UP = "up"
    DOWN = "down"


class Ordering(IntEnum):
    """Результат сравнения; значения совпадают со знаком разности a - b"""

    LESS = -1
    EQUAL = 0
    GREATER = 1


class OverflowPolicy(str, Enum):
    """Поведение при невыразимом в decimal128 результате"""

    RAISE = "raise"
    ZERO_FALLBACK = "zero_fallback"


# =============================================================================
# CONFIG
# =============================================================================


class EngineConfig(BaseModel):
    """
    Конфигурация DecimalEngine.

    Immutable модель (frozen=True). По умолчанию переполнение пробрасывается
    как EncodeOverflow. ZERO_FALLBACK воспроизводит совместимое поведение:
    невыразимый результат заменяется на ZERO, что вызывающий код обязан
    перепроверять.
    """

    exponent_min: int = Field(default=EXPONENT_MIN, description="Минимальный exponent операнда")
    exponent_max: int = Field(default=EXPONENT_MAX, description="Максимальный exponent операнда")
    overflow_policy: OverflowPolicy = Field(
        default=OverflowPolicy.RAISE, description="Обработка EncodeOverflow результата"
    )

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="after")
    def validate_exponent_range(self) -> "EngineConfig":
        if self.exponent_min > self.exponent_max:
            raise ValueError(
                f"exponent_min {self.exponent_min} exceeds exponent_max {self.exponent_max}"
            )
        return self


# =============================================================================
# SCALE ALIGNMENT
# =============================================================================


def align_scale(a: Decomposition, b: Decomposition) -> tuple[int, int, int]:
    """
    Приведение двух разложений к общему (более мелкому) exponent.

    Операнд с большим exponent умножается на 10^(разница), поэтому точность
    более точного операнда не теряется.

    Args:
        a: Первое разложение
        b: Второе разложение

    Returns:
        (coefficient_a, coefficient_b, exponent) на общем масштабе

    Examples:
        >>> align_scale(Decomposition(5, -1), Decomposition(123, -2))
        (50, 123, -2)
    """
    if a.exponent == b.exponent:
        return a.coefficient, b.coefficient, a.exponent

    if a.exponent < b.exponent:
        return a.coefficient, b.coefficient * 10 ** (b.exponent - a.exponent), a.exponent

    return a.coefficient * 10 ** (a.exponent - b.exponent), b.coefficient, b.exponent


def _split_magnitude(coefficient: int, exponent: int) -> tuple[int, int, int]:
    """(whole, fraction, fraction_digits) для |coefficient| × 10^exponent."""
    magnitude = abs(coefficient)
    if exponent >= 0:
        return magnitude * 10**exponent, 0, 0

    fraction_digits = -exponent
    whole, fraction = divmod(magnitude, 10**fraction_digits)
    return whole, fraction, fraction_digits


def _sign_of(value: int) -> Ordering:
    if value < 0:
        return Ordering.LESS
    if value > 0:
        return Ordering.GREATER
    return Ordering.EQUAL


# =============================================================================
# ENGINE
# =============================================================================


class DecimalEngine:
    """
    Decimal Arithmetic Engine: Add, Subtract, Multiply, Round, Compare.

    Stateless: экземпляр хранит только immutable конфигурацию, поэтому
    один engine можно безопасно использовать из любого числа потоков.
    """

    def __init__(self, config: EngineConfig | None = None):
        """
        Инициализация engine.

        Args:
            config: конфигурация (опционально, используется default)
        """
        self.config = config or EngineConfig()

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    def add(self, a: DecimalValue, b: DecimalValue) -> DecimalValue:
        """
        Сумма a + b.

        Exponent результата = min(exponent_a, exponent_b).

        Raises:
            DecodeError: операнд не раскладывается
            OutOfRange: exponent операнда вне диапазона
            EncodeOverflow: результат невыразим (только OverflowPolicy.RAISE)
        """
        da = self._decompose_checked(a, "add")
        db = self._decompose_checked(b, "add")
        ca, cb, exponent = align_scale(da, db)
        return self._encode_result(ca + cb, exponent, "add")

    def subtract(self, a: DecimalValue, b: DecimalValue) -> DecimalValue:
        """
        Разность a - b.

        Алгоритм Add с отрицанием coefficient второго операнда до выравнивания.
        """
        da = self._decompose_checked(a, "subtract")
        db = self._decompose_checked(b, "subtract")
        ca, cb, exponent = align_scale(da, Decomposition(-db.coefficient, db.exponent))
        return self._encode_result(ca + cb, exponent, "subtract")

    def multiply(self, a: DecimalValue, b: DecimalValue) -> DecimalValue:
        """
        Произведение a × b.

        Выравнивание не требуется: coefficient перемножаются, exponent
        складываются. Операнды проходят ту же проверку диапазона, что и Add.
        """
        da = self._decompose_checked(a, "multiply")
        db = self._decompose_checked(b, "multiply")
        return self._encode_result(
            da.coefficient * db.coefficient, da.exponent + db.exponent, "multiply"
        )

    def round(
        self,
        unit: DecimalValue,
        direction: RoundingDirection | str,
        value: DecimalValue,
    ) -> DecimalValue:
        """
        Округление value к границе, кратной unit.

        DOWN → ближайшая граница ≤ value (floor), UP → ближайшая граница ≥ value
        (ceiling). Знак unit игнорируется, используется его модуль.

        Args:
            unit: Единица округления (например, 0.05). Нулевая unit отключает округление
            direction: RoundingDirection или строка "up"/"down"
            value: Округляемое значение

        Returns:
            value без изменений, если unit == 0 или value уже на границе;
            иначе новое значение на рабочем масштабе min(exponent_value, exponent_unit)

        Raises:
            ValueError: неизвестное направление округления
            DecodeError: операнд не раскладывается
            OutOfRange: exponent операнда вне диапазона
            EncodeOverflow: результат невыразим (только OverflowPolicy.RAISE)

        Examples:
            >>> engine.round(parse_decimal("0.05"), RoundingDirection.DOWN, parse_decimal("1.23"))
            Decimal128('1.20')
            >>> engine.round(parse_decimal("0.05"), "up", parse_decimal("1.23"))
            Decimal128('1.25')
        """
        direction = RoundingDirection(direction)

        du = self._decompose_checked(unit, "round")
        if du.coefficient == 0:
            return value

        dv = self._decompose_checked(value, "round")
        coefficient, unit_coefficient, exponent = align_scale(dv, du)
        unit_coefficient = abs(unit_coefficient)

        # Остаток неотрицателен при положительном делителе
        remainder = coefficient % unit_coefficient
        if remainder == 0:
            return value

        rounded = coefficient - remainder
        if direction is RoundingDirection.UP:
            rounded += unit_coefficient

        return self._encode_result(rounded, exponent, "round")

    # -------------------------------------------------------------------------
    # Сравнение
    # -------------------------------------------------------------------------

    def compare(self, a: DecimalValue, b: DecimalValue) -> Ordering:
        """
        Сравнение a и b по значению (не по представлению).

        Алгоритм:
        1. Разные знаки → отрицательный операнд меньше (ноль неотрицателен)
        2. Равные exponent → сравнение coefficient
        3. Иначе модули делятся на целую часть и дробный остаток,
           остатки приводятся к общему дробному масштабу; сначала
           сравниваются целые части, затем остатки
        4. Оба операнда отрицательны → результат инвертируется

        Проверка диапазона exponent не выполняется.

        Returns:
            Ordering.LESS / Ordering.EQUAL / Ordering.GREATER

        Examples:
            >>> engine.compare(parse_decimal("1.50"), parse_decimal("1.5"))
            <Ordering.EQUAL: 0>
        """
        da = decompose(a)
        db = decompose(b)

        a_negative = da.coefficient < 0
        b_negative = db.coefficient < 0
        if a_negative != b_negative:
            return Ordering.LESS if a_negative else Ordering.GREATER

        if da.exponent == db.exponent:
            return _sign_of(da.coefficient - db.coefficient)

        whole_a, frac_a, digits_a = _split_magnitude(da.coefficient, da.exponent)
        whole_b, frac_b, digits_b = _split_magnitude(db.coefficient, db.exponent)

        if digits_a < digits_b:
            frac_a *= 10 ** (digits_b - digits_a)
        elif digits_b < digits_a:
            frac_b *= 10 ** (digits_a - digits_b)

        if whole_a != whole_b:
            result = _sign_of(whole_a - whole_b)
        else:
            result = _sign_of(frac_a - frac_b)

        if a_negative:
            return Ordering(-result)
        return result

    def equals(self, a: DecimalValue, b: DecimalValue) -> bool:
        """Численное равенство: "1.50" equals "1.5"."""
        return self.compare(a, b) is Ordering.EQUAL

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _decompose_checked(self, value: DecimalValue, operation: str) -> Decomposition:
        decomposition = decompose(value)
        exponent = decomposition.exponent
        if exponent < self.config.exponent_min or exponent > self.config.exponent_max:
            logger.debug(
                "decimal_exponent_out_of_range",
                operation=operation,
                exponent=exponent,
                exponent_min=self.config.exponent_min,
                exponent_max=self.config.exponent_max,
            )
            raise OutOfRange(
                f"{operation}: exponent {exponent} outside "
                f"[{self.config.exponent_min}, {self.config.exponent_max}]"
            )
        return decomposition

    def _encode_result(self, coefficient: int, exponent: int, operation: str) -> DecimalValue:
        try:
            return encode(coefficient, exponent)
        except EncodeOverflow:
            if self.config.overflow_policy is OverflowPolicy.RAISE:
                raise
            # Совместимый режим: результат деградирует до ZERO
            logger.warning(
                "decimal_encode_overflow_zero_fallback",
                operation=operation,
                coefficient_bit_length=coefficient.bit_length(),
                exponent=exponent,
            )
            return ZERO


# =============================================================================
# MODULE-LEVEL API
# =============================================================================

# Engine по умолчанию, read-only после импорта
DEFAULT_ENGINE: Final[DecimalEngine] = DecimalEngine()


def add(a: DecimalValue, b: DecimalValue) -> DecimalValue:
    """a + b через DEFAULT_ENGINE."""
    return DEFAULT_ENGINE.add(a, b)


def subtract(a: DecimalValue, b: DecimalValue) -> DecimalValue:
    """a - b через DEFAULT_ENGINE."""
    return DEFAULT_ENGINE.subtract(a, b)


def multiply(a: DecimalValue, b: DecimalValue) -> DecimalValue:
    """a × b через DEFAULT_ENGINE."""
    return DEFAULT_ENGINE.multiply(a, b)


def round_to_unit(
    unit: DecimalValue,
    direction: RoundingDirection | str,
    value: DecimalValue,
) -> DecimalValue:
    """Округление value к единице unit через DEFAULT_ENGINE."""
    return DEFAULT_ENGINE.round(unit, direction, value)


def compare(a: DecimalValue, b: DecimalValue) -> Ordering:
    """Сравнение a и b через DEFAULT_ENGINE."""
    return DEFAULT_ENGINE.compare(a, b)


def equals(a: DecimalValue, b: DecimalValue) -> bool:
    """Численное равенство a и b."""
    return DEFAULT_ENGINE.equals(a, b)
