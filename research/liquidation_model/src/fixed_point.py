"""uint256 checked arithmetic, truncating like the on-chain code"""
from decimal import Decimal

from .constants import MAX_UINT256, WAD, RAY
from .errors import ArithmeticOverflowError

def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    result = a + b
    if result > MAX_UINT256:
        raise ArithmeticOverflowError("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    if b > a:
        raise ArithmeticOverflowError("Arithmetic underflow in subtraction")
    return a - b

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    result = a * b
    if result > MAX_UINT256:
        raise ArithmeticOverflowError("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Divide with zero checking, rounding toward zero"""
    if b == 0:
        raise ArithmeticOverflowError("Division by zero")
    return a // b

def minimum(a: int, b: int) -> int:
    return a if a <= b else b

def wmultiply(a: int, b: int) -> int:
    """a * b / WAD"""
    return checked_mul(a, b) // WAD

def to_wad(value) -> int:
    """Convert a human number (int, float, str, Decimal) into WAD"""
    return _scale(value, WAD)

def to_ray(value) -> int:
    return _scale(value, RAY)

def to_rad(value) -> int:
    return _scale(value, RAY * WAD)

def _scale(value, scale: int) -> int:
    return int(Decimal(str(value)) * scale)
