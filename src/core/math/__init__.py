"""
Core math modules

Точная fixed-point decimal арифметика поверх BSON decimal128.
"""

# Decimal Codec
from src.core.math.decimal_codec import (
    # Constants
    DECIMAL128_MAX_DIGITS,
    ZERO,
    # Types
    DecimalValue,
    Decomposition,
    # Exceptions
    DecimalArithmeticError,
    DecodeError,
    EncodeOverflow,
    # Functions
    decompose,
    encode,
    is_zero,
    parse_decimal,
)

# Decimal Arithmetic
from src.core.math.decimal_arithmetic import (
    DEFAULT_ENGINE,
    EXPONENT_MAX,
    EXPONENT_MIN,
    DecimalEngine,
    EngineConfig,
    Ordering,
    OutOfRange,
    OverflowPolicy,
    RoundingDirection,
    add,
    align_scale,
    compare,
    equals,
    multiply,
    round_to_unit,
    subtract,
)

__all__ = [
    # Decimal Codec — Constants
    "DECIMAL128_MAX_DIGITS",
    "ZERO",
    # Decimal Codec — Types
    "DecimalValue",
    "Decomposition",
    # Decimal Codec — Exceptions
    "DecimalArithmeticError",
    "DecodeError",
    "EncodeOverflow",
    # Decimal Codec — Functions
    "decompose",
    "encode",
    "is_zero",
    "parse_decimal",
    # Decimal Arithmetic — Constants
    "DEFAULT_ENGINE",
    "EXPONENT_MAX",
    "EXPONENT_MIN",
    # Decimal Arithmetic — Exceptions
    "OutOfRange",
    # Decimal Arithmetic — Types
    "DecimalEngine",
    "EngineConfig",
    "Ordering",
    "OverflowPolicy",
    "RoundingDirection",
    # Decimal Arithmetic — Functions
    "add",
    "align_scale",
    "compare",
    "equals",
    "multiply",
    "round_to_unit",
    "subtract",
]
