"""A small printf-style formatter with the quirks of a freestanding libc."""

import math
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

_FLAGS = "-+# 0"
_LENGTHS = "hljztL"

# (bits, signed) for the integer an argument is reduced to before rendering.
_UNSIGNED: Dict[str, Tuple[int, bool]] = {
    "": (32, False),
    "H": (8, False),
    "h": (16, False),
    "l": (64, True),
    "q": (64, True),
    "j": (64, True),
    "z": (64, True),
    "t": (64, True),
}
_SIGNED: Dict[str, Tuple[int, bool]] = {
    "": (32, True),
    "H": (8, True),
    "h": (16, True),
    "l": (64, True),
    "q": (64, True),
    "j": (64, True),
    "z": (64, True),
    "t": (64, True),
}
_COUNT: Dict[str, Tuple[int, bool]] = {
    "": (32, True),
    "H": (8, True),
    "h": (16, True),
    "l": (64, True),
    "q": (64, True),
    "j": (64, True),
    "z": (64, False),
    "t": (64, True),
}


def _wrap(value: int, bits: int, signed: bool) -> int:
    value = int(value) & ((1 << bits) - 1)
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def int_str(
    value,
    base=10,
    plus_sign=False,
    space_sign=False,
    padding=0,
    left_justify=False,
    zero_pad=False,
) -> str:
    """Render an integer with sign and padding.

    Base 16 uses uppercase digits; base 17 means base 16 with lowercase digits.
    Padding is counted over sign and digits; left-justified text is padded on
    the right, otherwise the fill goes in front of the sign.
    """
    if base == 16:
        digits = "0123456789ABCDEF"
    elif base == 17:
        digits = "0123456789abcdef"
        base = 16
    elif 2 <= base <= 10:
        digits = "0123456789"
    else:
        raise ValueError(f"unsupported base {base}")

    value = int(value)
    if value < 0:
        sign = "-"
        value = -value
    elif plus_sign:
        sign = "+"
    elif space_sign:
        sign = " "
    else:
        sign = ""

    body: List[str] = []
    while True:
        value, rem = divmod(value, base)
        body.append(digits[rem])
        if not value:
            break
    text = sign + "".join(reversed(body))

    fill = ("0" if zero_pad else " ") * max(padding - len(text), 0)
    return text + fill if left_justify else fill + text


class _Output:
    """Collects emitted text and hands out arguments in order."""

    def __init__(self, args: Tuple[Any, ...]) -> None:
        self._args = iter(args)
        self._parts: List[str] = []
        self.count = 0

    def next_arg(self) -> Any:
        try:
            return next(self._args)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def emit(self, text: str) -> None:
        self._parts.append(text)
        self.count += len(text)

    @property
    def text(self) -> str:
        return "".join(self._parts)


def _is_digit(c: str) -> bool:
    return len(c) == 1 and "0" <= c <= "9"


def _as_char(arg: Any) -> str:
    if isinstance(arg, str) and len(arg) == 1:
        return arg
    if isinstance(arg, int):
        return chr(arg & 0xFF)
    raise TypeError(f"%c needs an int or a single character, got {arg!r}")


def _as_text(arg: Any) -> str:
    if isinstance(arg, (bytes, bytearray)):
        text = bytes(arg).decode("latin-1")
    else:
        text = str(arg)
    return text.split("\0", 1)[0]


def _convert(fmt: str, pos: int, out: _Output) -> int:
    """Handle one conversion starting just after '%'; return the next position."""

    def at(i: int) -> str:
        return fmt[i] if i < len(fmt) else ""

    left = plus = alt = space = zero = False
    while at(pos) and at(pos) in _FLAGS:
        flag = at(pos)
        if flag == "-":
            left = True
        elif flag == "+":
            plus = True
        elif flag == "#":
            alt = True
        elif flag == " ":
            space = True
        else:
            zero = True
        pos += 1

    width = 0
    while _is_digit(at(pos)):
        width = width * 10 + int(at(pos))
        pos += 1
    if at(pos) == "*":
        width = int(out.next_arg())
        pos += 1

    if at(pos) == ".":
        pos += 1
        prec = 0
        while _is_digit(at(pos)):
            prec = prec * 10 + int(at(pos))
            pos += 1
        if at(pos) == "*":
            prec = int(out.next_arg())
            pos += 1
    else:
        prec = 6

    length = ""
    if at(pos) and at(pos) in _LENGTHS:
        length = at(pos)
        pos += 1
        if at(pos) == "h":
            length = "H"
        elif at(pos) == "l":
            length = "q"
            pos += 1

    spec = at(pos)
    if not spec:
        return pos

    base = 10
    if spec == "o":
        base = 8
        spec = "u"
        if alt:
            out.emit("0")
    if spec == "p":
        base = 16
        length = "z"
        spec = "u"

    if spec in ("X", "x", "u"):
        if spec == "X":
            base = 16
        if spec in ("X", "x"):
            base = 17 if base == 10 else base
            if alt:
                out.emit("0x")
        _emit_integer(out, _UNSIGNED.get(length), base, plus, space, width, left, zero)
    elif spec in ("d", "i"):
        _emit_integer(out, _SIGNED.get(length), base, plus, space, width, left, zero)
    elif spec == "c":
        out.emit(_as_char(out.next_arg()))
    elif spec == "s":
        out.emit(_as_text(out.next_arg()))
    elif spec == "n":
        size = _COUNT.get(length)
        if size is not None:
            store: Callable[[int], Any] = out.next_arg()
            if not callable(store):
                raise TypeError("%n needs a callable that receives the count")
            store(_wrap(out.count, *size))
    elif spec in ("e", "E", "f", "F", "g", "G"):
        expo = _emit_float(out, spec in ("e", "E"), base, plus, space, width, prec, alt, left, zero)
        if spec in ("e", "E"):
            out.emit(spec + "+")
            out.emit(int_str(expo, 10, False, False, 2, False, True))

    return pos + 1


def _emit_integer(
    out: _Output,
    size: Optional[Tuple[int, bool]],
    base: int,
    plus: bool,
    space: bool,
    width: int,
    left: bool,
    zero: bool,
) -> None:
    if size is None:
        return
    value = _wrap(int(out.next_arg()), *size)
    out.emit(int_str(value, base, plus, space, width, left, zero))


def _emit_float(
    out: _Output,
    emode: bool,
    base: int,
    plus: bool,
    space: bool,
    width: int,
    prec: int,
    alt: bool,
    left: bool,
    zero: bool,
) -> int:
    value = float(out.next_arg())
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")

    expo = 0
    while emode and value >= 10:
        value /= 10
        expo += 1

    form = width - prec - expo - (1 if prec or alt else 0)
    if emode:
        form -= 4
    form = max(form, 0)

    whole = math.trunc(value)
    out.emit(int_str(whole, base, plus, space, form, left, zero))

    value -= whole
    for _ in range(prec):
        value *= 10
    decimals = math.trunc(value + 0.5)

    if prec:
        out.emit(".")
        digits = int_str(decimals, 10)
        out.emit(digits[:prec] if prec > 0 else digits)
    elif alt:
        out.emit(".")
    return expo


def sprintf(fmt: str, *args: Any) -> str:
    """Format ``args`` according to ``fmt`` and return the text."""
    fmt = fmt.split("\0", 1)[0]
    out = _Output(args)
    pos = 0
    while pos < len(fmt):
        ch = fmt[pos]
        if ch == "%":
            pos = _convert(fmt, pos + 1, out)
        else:
            out.emit(ch)
            pos += 1
    return out.text


def printf(fmt: str, *args: Any) -> int:
    """Write formatted text to standard output and return the characters written."""
    text = sprintf(fmt, *args)
    sys.stdout.write(text)
    return len(text)