from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List

from huffman_errors import ArgumentError, FormatError

# Line feed and carriage return delimit table rows, so they are written as words
ESCAPE_WORDS = {"newline": "\n", "return": "\r"}
_SYMBOL_WORDS = {sym: word for word, sym in ESCAPE_WORDS.items()}

_LINE_PATTERN = re.compile(r"^.*:[0-9]+(\.[0-9]+)?$", re.DOTALL)


@dataclass(frozen=True)
class FrequencyEntry:
    symbol: str
    weight: float

    def __post_init__(self):
        if not isinstance(self.symbol, str) or len(self.symbol) != 1:
            raise ArgumentError(f"symbol must be a single character, got {self.symbol!r}")
        if self.weight < 0:
            raise ArgumentError(f"weight must be non-negative, got {self.weight!r}")


def parse_frequency(line: str) -> FrequencyEntry:
    """
    Parse one `symbol:weight` row.
    `newline` and `return` stand for line feed and carriage return; a row starting with
    ':' describes the colon itself, so its weight is the third field (`::4`).
    """
    if not _LINE_PATTERN.fullmatch(line):
        raise FormatError(f"frequency row {line!r} does not match <symbol>:<number>")

    fields = line.split(":")
    if fields[0] in ESCAPE_WORDS:
        symbol = ESCAPE_WORDS[fields[0]]
        number = fields[1]
    elif line[0] == ":":
        symbol = ":"
        if len(fields) < 3 or fields[1] != "":
            raise FormatError(f"colon row {line!r} must look like ::<number>")
        number = fields[2]
    else:
        if len(fields[0]) != 1:
            raise FormatError(f"symbol {fields[0]!r} in row {line!r} is not a single character")
        symbol = fields[0]
        number = fields[1]

    try:
        if "." in number:
            weight = float(number)
            if weight.is_integer():
                weight = int(weight)
        else:
            weight = int(number) # exact, however large
    except ValueError:
        raise FormatError(f"frequency {number!r} in row {line!r} is not a number") from None
    return FrequencyEntry(symbol, weight)


def _format_weight(weight) -> str:
    if isinstance(weight, int):
        return str(weight)
    if float(weight).is_integer():
        return str(int(weight))
    # positional notation only, the row pattern does not accept exponents
    return format(Decimal(repr(float(weight))), "f")


def format_frequency(entry: FrequencyEntry) -> str:
    token = _SYMBOL_WORDS.get(entry.symbol, entry.symbol)
    return f"{token}:{_format_weight(entry.weight)}"


def parse_table(text: str) -> List[FrequencyEntry]:
    # empty rows carry nothing, a line feed symbol is always spelled `newline`
    return [parse_frequency(line) for line in text.split("\n") if line != ""]


def format_table(entries: Iterable[FrequencyEntry]) -> str:
    return "\n".join(format_frequency(e) for e in entries)


def count_frequencies(text: str) -> List[FrequencyEntry]: # one entry per distinct character, first occurrence order
    return [FrequencyEntry(symbol, count) for symbol, count in Counter(text).items()]
