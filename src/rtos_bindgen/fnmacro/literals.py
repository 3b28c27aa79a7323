"""
Numeric Literal Recognition
===========================

Helpers that split a preprocessing-number token into its value text and
its suffix markers.

Integer Formats
---------------
| Format      | Prefix  | Example    | Rendered |
|-------------|---------|------------|----------|
| Decimal     | (none)  | 100u       | 100      |
| Hexadecimal | 0x/0X   | 0x7FUL     | 0x7F     |
| Octal       | 0       | 0177       | 0o177    |
| Binary      | 0b/0B   | 0b1010     | 0b1010   |

An integer may carry an unsigned marker (u) and a size marker (l, ll or
z) in either order. The markers are recorded on the literal but the
rendered text is the value alone. Macros sometimes spell the suffix as a
separate pasted token (1 ## U, 1 ## ULL); merge_suffix() folds such a
token into markers already read.

Floating literals (1.5, 1.5f, 1f, 1e3) drop their f/l suffix.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import re


class IntegerSize(Enum):
    """Size marker of an integer literal suffix."""
    LONG = "l"
    LONG_LONG = "ll"
    SIZE = "z"


# Unsigned and size markers in either order, each at most once.
# ll must be written in a single case (ll or LL).
SUFFIX_PATTERN = re.compile(
    r"^(?:[uU](?P<size1>ll|LL|[lLzZ])?|(?P<size2>ll|LL|[lLzZ])(?P<unsigned2>[uU])?)?$"
)

INTEGER_PATTERN = re.compile(
    r"^(?:(?P<hex>0[xX][0-9A-Fa-f]+)"
    r"|(?P<binary>0[bB][01]+)"
    r"|(?P<octal>0[0-7]+)"
    r"|(?P<decimal>[1-9][0-9]*|0))"
    r"(?P<suffix>[A-Za-z]*)$"
)

FLOAT_PATTERN = re.compile(
    r"^(?P<value>(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[0-9]+[eE][+-]?[0-9]+"
    r"|[0-9]+(?=[fF]$))"
    r"(?P<suffix>[fFlL]?)$"
)


@dataclass(frozen=True)
class NumberValue:
    """
    A recognized numeric literal.

    Attributes:
        text: Rendered value text, suffix removed
        is_unsigned: An unsigned marker was present
        size: Size marker, if any
        is_float: True for floating literals
    """
    text: str
    is_unsigned: bool = False
    size: Optional[IntegerSize] = None
    is_float: bool = False


def parse_suffix(suffix: str) -> Optional[tuple[bool, Optional[IntegerSize]]]:
    """
    Parse an integer suffix into (is_unsigned, size).

    Returns None if the text is not a valid suffix permutation.
    """
    match = SUFFIX_PATTERN.match(suffix)
    if match is None:
        return None

    size_text = match.group("size1") or match.group("size2")
    size = IntegerSize(size_text.lower()) if size_text else None
    is_unsigned = "u" in suffix.lower()
    return is_unsigned, size


def merge_suffix(
    is_unsigned: bool,
    size: Optional[IntegerSize],
    suffix: str,
) -> Optional[tuple[bool, Optional[IntegerSize]]]:
    """
    Fold a pasted suffix token into the markers read so far.

    Returns None when the token is not a suffix or repeats a marker that
    is already present (1u ## U).
    """
    parsed = parse_suffix(suffix)
    if parsed is None or not suffix:
        return None

    extra_unsigned, extra_size = parsed
    if (extra_unsigned and is_unsigned) or (extra_size and size):
        return None

    return is_unsigned or extra_unsigned, size or extra_size


def parse_number(text: str) -> Optional[NumberValue]:
    """
    Recognize a preprocessing-number token.

    Returns None if the token is not a valid integer or floating literal.
    """
    match = INTEGER_PATTERN.match(text)
    parsed = parse_suffix(match.group("suffix")) if match else None
    if parsed is not None:
        is_unsigned, size = parsed

        if match.group("hex"):
            value = "0x" + match.group("hex")[2:]
        elif match.group("binary"):
            value = "0b" + match.group("binary")[2:]
        elif match.group("octal"):
            value = "0o" + match.group("octal")[1:]
        else:
            value = match.group("decimal")

        return NumberValue(value, is_unsigned=is_unsigned, size=size)

    match = FLOAT_PATTERN.match(text)
    if match:
        value = match.group("value")
        if value.startswith("."):
            value = "0" + value
        if "." not in value and "e" not in value.lower():
            value += ".0"
        elif value.endswith("."):
            value += "0"
        return NumberValue(value, is_float=True)

    return None
