"""
Тесты для Decimal Codec — граница decimal128 ↔ (coefficient, exponent)

Проверяемые инварианты:
1. decompose сохраняет представление ("1.50" → (150, -2))
2. encode(*decompose(v)) == v
3. NaN/Infinity и не-Decimal128 → DecodeError
4. Невыразимые значения → EncodeOverflow (без молчаливого округления)
5. ZERO — каноническое "0"
"""

import pytest
from bson.decimal128 import Decimal128

from src.core.math.decimal_codec import (
    DECIMAL128_MAX_DIGITS,
    ZERO,
    DecimalArithmeticError,
    DecodeError,
    Decomposition,
    EncodeOverflow,
    decompose,
    encode,
    is_zero,
    parse_decimal,
)


# =============================================================================
# ТЕСТЫ: decompose
# =============================================================================


class TestDecompose:
    """Тесты decompose: разложение на coefficient и exponent."""

    def test_trailing_zero_kept(self):
        """Представление не нормализуется."""
        assert decompose(parse_decimal("1.50")) == Decomposition(150, -2)
        assert decompose(parse_decimal("1.5")) == Decomposition(15, -1)

    def test_negative_value(self):
        """Знак переносится в coefficient."""
        assert decompose(parse_decimal("-0.05")) == Decomposition(-5, -2)

    def test_positive_exponent(self):
        """Положительный exponent сохраняется."""
        assert decompose(parse_decimal("-5E+3")) == Decomposition(-5, 3)

    def test_zero(self):
        """ZERO раскладывается в (0, 0)."""
        assert decompose(ZERO) == Decomposition(0, 0)

    def test_max_digits_coefficient(self):
        """34-значный coefficient раскладывается точно."""
        digits = "9" * DECIMAL128_MAX_DIGITS
        assert decompose(parse_decimal(digits)).coefficient == int(digits)

    @pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, text):
        """NaN/Infinity не раскладываются."""
        with pytest.raises(DecodeError, match="non-finite"):
            decompose(parse_decimal(text))

    def test_wrong_type_rejected(self):
        """Не-Decimal128 входы отвергаются."""
        with pytest.raises(DecodeError, match="Expected Decimal128"):
            decompose("1.23")

        with pytest.raises(DecodeError):
            decompose(1.23)


# =============================================================================
# ТЕСТЫ: encode
# =============================================================================


class TestEncode:
    """Тесты encode: сборка Decimal128 без округления."""

    def test_basic(self):
        """Сборка из coefficient и exponent."""
        assert encode(123, -2) == parse_decimal("1.23")
        assert encode(-5, 3) == parse_decimal("-5E+3")
        assert encode(0, 0) == ZERO

    @pytest.mark.parametrize("text", ["1.23", "-0.05", "630.5230005", "1E+300", "0.000"])
    def test_inverts_decompose(self, text):
        """encode(*decompose(v)) == v."""
        value = parse_decimal(text)
        assert encode(*decompose(value)) == value

    def test_too_many_digits_overflow(self):
        """35 значащих цифр невыразимы в decimal128."""
        with pytest.raises(EncodeOverflow, match="too large"):
            encode(int("1" * 35), 0)

    def test_exponent_beyond_format_overflow(self):
        """Exponent за пределами decimal128."""
        with pytest.raises(EncodeOverflow):
            encode(1, 7000)

    def test_overflow_is_arithmetic_error(self):
        """EncodeOverflow входит в иерархию DecimalArithmeticError."""
        with pytest.raises(DecimalArithmeticError):
            encode(-int("7" * 40), -2)

    def test_large_coefficient_exact(self):
        """Coefficient больше prec=28 контекста по умолчанию собирается точно."""
        coefficient = int("1234567890" * 3 + "1234")  # 34 цифры
        value = encode(coefficient, -10)
        assert decompose(value) == Decomposition(coefficient, -10)


# =============================================================================
# ТЕСТЫ: parse_decimal, ZERO, is_zero
# =============================================================================


class TestParseDecimal:
    """Тесты parse_decimal и нулевых значений."""

    def test_returns_decimal128(self):
        assert isinstance(parse_decimal("1.23"), Decimal128)

    @pytest.mark.parametrize("text", ["abc", "1.2.3", "", "--1"])
    def test_malformed_rejected(self, text):
        """Некорректный текст → DecodeError."""
        with pytest.raises(DecodeError, match="Cannot parse"):
            parse_decimal(text)

    def test_inexact_rejected(self):
        """Текст, требующий округления, не принимается."""
        with pytest.raises(DecodeError):
            parse_decimal("1" * 35)

    def test_zero_constant(self):
        """ZERO — decode строки "0"."""
        assert ZERO == parse_decimal("0")

    def test_is_zero_any_exponent(self):
        """Ноль распознаётся при любом exponent."""
        assert is_zero(ZERO)
        assert is_zero(parse_decimal("0.00"))
        assert is_zero(parse_decimal("-0E+5"))
        assert not is_zero(parse_decimal("0.01"))
