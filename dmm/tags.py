"""Menu line tags.

A tag is the encoded index of an entry in the resolved list. It is attached
to every line written to the selector so that the echoed line can be mapped
back to the entry it came from, while text the user typed by hand carries no
tag and is treated as an ad-hoc command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from types import MappingProxyType
from typing import ClassVar, Protocol

DEFAULT_SEPARATOR = ": "

# Zero-width space, non-joiner and joiner: invisible in the selector and
# practically never typed by hand.
BINARY_ALPHABET = "\u200b\u200c"
TERNARY_ALPHABET = "\u200b\u200c\u200d"

SYMBOL_SCHEMES = MappingProxyType(
    {
        "binary": BINARY_ALPHABET,
        "ternary": TERNARY_ALPHABET,
    }
)

_LEADING_DIGITS_RE = re.compile(r"[0-9]+")


class TagCodec(Protocol):
    count: int
    separator: str
    prefix: ClassVar[bool]

    def encode(self, index: int) -> str: ...

    def decode(self, line: str) -> int | None: ...

    def render(self, index: int, name: str) -> str: ...


def _check_index(index: int, count: int) -> None:
    if index < 0 or index >= count:
        raise ValueError(f"tag index {index} out of range for {count} entries")


@dataclass(frozen=True, slots=True)
class DecimalTag:
    """Prefix tags made of the decimal index, e.g. ``12: firefox``.

    Typed input that starts with an in-range number decodes as that entry.
    """

    count: int
    separator: str = DEFAULT_SEPARATOR
    prefix: ClassVar[bool] = True

    def encode(self, index: int) -> str:
        _check_index(index, self.count)
        return str(index)

    def decode(self, line: str) -> int | None:
        match = _LEADING_DIGITS_RE.match(line)
        if match is None:
            return None
        digits = match.group().lstrip("0") or "0"
        # Also keeps int() clear of its max-digits limit.
        if len(digits) > len(str(self.count)):
            return None
        index = int(digits)
        return index if index < self.count else None

    def render(self, index: int, name: str) -> str:
        return f"{self.encode(index)}{self.separator}{name}"


@dataclass(frozen=True, slots=True)
class SymbolTag:
    """Fixed-width suffix tags written in a small invisible alphabet."""

    count: int
    alphabet: str = BINARY_ALPHABET
    separator: str = ""
    prefix: ClassVar[bool] = False
    width: int = field(init=False)

    def __post_init__(self) -> None:
        if len(self.alphabet) < 2:
            raise ValueError("tag alphabet needs at least two symbols")
        if len(set(self.alphabet)) != len(self.alphabet):
            raise ValueError("tag alphabet symbols must be distinct")
        if any(symbol.isdigit() for symbol in self.alphabet):
            raise ValueError("tag alphabet must not contain digits")

        base = len(self.alphabet)
        width = 1
        capacity = base
        while capacity < self.count:
            width += 1
            capacity *= base
        object.__setattr__(self, "width", width)

    def encode(self, index: int) -> str:
        _check_index(index, self.count)
        base = len(self.alphabet)
        symbols: list[str] = []
        for _ in range(self.width):
            index, digit = divmod(index, base)
            symbols.append(self.alphabet[digit])
        return "".join(reversed(symbols))

    def decode(self, line: str) -> int | None:
        start = len(line)
        while start > 0 and line[start - 1] in self.alphabet:
            start -= 1
        run = line[start:]
        if len(run) < self.width:
            return None

        base = len(self.alphabet)
        index = 0
        for symbol in run[-self.width :]:
            index = index * base + self.alphabet.index(symbol)
        return index if index < self.count else None

    def render(self, index: int, name: str) -> str:
        return f"{name}{self.separator}{self.encode(index)}"


def build_codec(
    count: int,
    *,
    numbered: bool,
    separator: str = DEFAULT_SEPARATOR,
    scheme: str = "binary",
) -> DecimalTag | SymbolTag:
    if numbered:
        return DecimalTag(count=count, separator=separator)

    alphabet = SYMBOL_SCHEMES.get(scheme)
    if alphabet is None:
        raise ValueError(f"unknown tag scheme: {scheme}")
    return SymbolTag(count=count, alphabet=alphabet)
