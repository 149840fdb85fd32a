"""
Text compression on top of the Huffman tree.

Compressed text is the Huffman bitstream padded with False bits to a multiple of 6 and
packed one character per 6 bits through the base64 symbol alphabet. Compress and
decompress must be given the same frequency table.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from bitbuffer import PACK_WIDTH, BitBuffer
from frequency import FrequencyEntry, count_frequencies, format_table, parse_table
from huffman import Internal, Leaf, build_huffman_tree, decode, generate_codes
from huffman_errors import ArgumentError, KeyNotFoundError, UnderflowError

logger = logging.getLogger(__name__)

FrequencySource = Union[str, Iterable[FrequencyEntry]] # table text or parsed entries


class CompressedText(str):
    """Packed characters that also remember how many of their bits are meaningful (the rest is pad)."""

    def __new__(cls, payload: str, bit_count: int):
        obj = super().__new__(cls, payload)
        obj.bit_count = bit_count
        return obj

    @property
    def pad_bits(self) -> int:
        return len(self) * PACK_WIDTH - self.bit_count


def _entries(frequencies: FrequencySource) -> List[FrequencyEntry]:
    if isinstance(frequencies, str):
        return parse_table(frequencies)
    return list(frequencies)


def compute_frequencies(plaintext: str) -> str:
    """Frequency table text for `plaintext`: one `symbol:count` row per distinct character."""
    return format_table(count_frequencies(plaintext))


def compress(plaintext: str, frequencies: FrequencySource) -> CompressedText:
    tree = build_huffman_tree(_entries(frequencies))
    codes = generate_codes(tree)

    bits = BitBuffer()
    for symbol in plaintext:
        code = codes.get(symbol)
        if code is None:
            raise KeyNotFoundError(f"symbol {symbol!r} is not in the frequency table")
        bits.append(code)

    bit_count = bits.count()
    pad_bits = bits.pad(PACK_WIDTH)
    logger.debug("compressed %d symbols into %d bits (+%d pad)", len(plaintext), bit_count, pad_bits)
    return CompressedText(bits.pack(), bit_count)


def _is_trailing_pad(root, bits: BitBuffer) -> bool:
    # fewer than PACK_WIDTH False bits that cannot reach a leaf from the root
    if bits.count() >= PACK_WIDTH or any(bits):
        return False
    if isinstance(root, Leaf):
        return True # the lone symbol is spelled with a True bit
    node = root
    for _ in range(bits.count()):
        node = node.right
        if isinstance(node, Leaf):
            return False
    return isinstance(node, Internal)


def decompress(compressed: str, frequencies: FrequencySource, bit_count: Optional[int] = None) -> str:
    """
    Decode packed text back to the plaintext.

    With a known `bit_count` (passed in, or carried by a CompressedText) exactly that many bits
    are decoded. Without one, decoding runs until the bits are exhausted and only a trailing
    pad that cannot spell a symbol is skipped.
    """
    if bit_count is None:
        bit_count = getattr(compressed, "bit_count", None)

    tree = build_huffman_tree(_entries(frequencies))
    bits = BitBuffer.unpack(compressed)
    total = bits.count()

    out = []
    if bit_count is not None:
        pad_bits = total - bit_count
        if bit_count < 0 or not 0 <= pad_bits < PACK_WIDTH:
            raise ArgumentError(f"bit count {bit_count} does not fit {len(compressed)} packed characters")
        while bits.count() > pad_bits:
            out.append(decode(tree.root, bits))
        if bits.count() != pad_bits:
            raise UnderflowError("last code runs into the padding, frequency table does not match the stream")
    else:
        while bits.count() > 0:
            if _is_trailing_pad(tree.root, bits):
                break
            out.append(decode(tree.root, bits))

    logger.debug("decompressed %d packed characters into %d symbols", len(compressed), len(out))
    return "".join(out)
