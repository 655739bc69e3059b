"""Integer to text conversion in bases 2 through 16."""

_DIGITS = "0123456789abcdef"
_MIN_BASE = 2
_MAX_BASE = 16
_U64_MASK = 0xFFFFFFFFFFFFFFFF


def _check_base(base: int) -> None:
    if not _MIN_BASE <= base <= _MAX_BASE:
        raise ValueError(f"base must be between {_MIN_BASE} and {_MAX_BASE}, got {base}")


def _digits(value: int, base: int) -> str:
    """Render a non-negative integer without any prefix."""
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, base)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def itoa(value: int, base: int) -> str:
    """Render a signed 64-bit integer in ``base`` with lowercase digits and no prefix.

    The value is taken modulo 2**64 as a two's complement signed integer.
    Raises ValueError if ``base`` is outside 2..16.
    """
    _check_base(base)
    value = int(value) & _U64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    if value < 0:
        return "-" + _digits(-value, base)
    return _digits(value, base)


def utoa(value: int, base: int) -> str:
    """Render an unsigned 64-bit integer in ``base`` with lowercase digits and no prefix.

    The value is taken modulo 2**64. Raises ValueError if ``base`` is outside 2..16.
    """
    _check_base(base)
    return _digits(int(value) & _U64_MASK, base)