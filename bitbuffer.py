from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator, Optional

from huffman_errors import ArgumentError, FormatError, UnderflowError

PACKING_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PACK_WIDTH = 6 # bits per packed character

_ALPHABET_INDEX = {ch: i for i, ch in enumerate(PACKING_ALPHABET)}


class BitBuffer:
    """
    FIFO sequence of bits: append to the back, pop from the front.
    The front bit is the earliest appended one, so popping replays bits in encode order.
    """

    def __init__(self, bits: Iterable[bool] = ()):
        self._bits = deque(bool(b) for b in bits)

    def append(self, value, width: Optional[int] = None) -> BitBuffer:
        """
        append(bit), append(value, width) or append(other_buffer).
        Integer values contribute their low `width` bits, MSB first.
        Returns self so calls can be chained.
        """
        if isinstance(value, BitBuffer):
            self._bits.extend(list(value._bits)) # copy, `value` keeps its bits
        elif width is not None:
            if width < 0:
                raise ArgumentError(f"width must be non-negative, got {width}")
            for i in range(width - 1, -1, -1):
                self._bits.append(bool((value >> i) & 1))
        else:
            self._bits.append(bool(value))
        return self

    def pop(self) -> bool:
        if not self._bits:
            raise UnderflowError("pop from empty bit buffer")
        return self._bits.popleft()

    def count(self) -> int:
        return len(self._bits)

    def pad(self, multiple: int = PACK_WIDTH) -> int:
        """Append False bits until the length is a multiple of `multiple`. Returns how many were added."""
        added = 0
        while len(self._bits) % multiple != 0:
            self._bits.append(False)
            added += 1
        return added

    def pack(self) -> str:
        """Map every 6-bit group (MSB first) through PACKING_ALPHABET. Leaves the buffer untouched."""
        if len(self._bits) % PACK_WIDTH != 0:
            raise ArgumentError(
                f"cannot pack {len(self._bits)} bits, length must be a multiple of {PACK_WIDTH}"
            )
        out = []
        acc = 0
        acc_bits = 0
        for bit in self._bits:
            acc = (acc << 1) | (1 if bit else 0)
            acc_bits += 1
            if acc_bits == PACK_WIDTH:
                out.append(PACKING_ALPHABET[acc])
                acc = 0
                acc_bits = 0
        return "".join(out)

    @classmethod
    def unpack(cls, text: str) -> BitBuffer:
        bits = cls()
        for position, ch in enumerate(text):
            index = _ALPHABET_INDEX.get(ch)
            if index is None:
                raise FormatError(f"character {ch!r} at position {position} is not in the packing alphabet")
            bits.append(index, PACK_WIDTH)
        return bits

    def __len__(self) -> int:
        return len(self._bits)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._bits)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BitBuffer):
            return NotImplemented
        return self._bits == other._bits

    def __repr__(self) -> str:
        return f"BitBuffer('{self.to_string()}')"

    def to_string(self) -> str:
        return "".join("1" if b else "0" for b in self._bits)

    @classmethod
    def from_string(cls, bitstring: str) -> BitBuffer: # bitstring: '0'/'1' characters
        for ch in bitstring:
            if ch not in "01":
                raise FormatError(f"bit string may only contain '0' and '1', got {ch!r}")
        return cls(ch == "1" for ch in bitstring)
