import random

import pytest

from bitbuffer import PACKING_ALPHABET, BitBuffer
from huffman_errors import ArgumentError, FormatError, UnderflowError


def test_pop_is_fifo():
	bits = BitBuffer()
	bits.append(True).append(False).append(False)
	assert bits.pop() is True
	assert bits.pop() is False
	assert bits.count() == 1


def test_pop_empty_raises_underflow():
	bits = BitBuffer()
	with pytest.raises(UnderflowError):
		bits.pop()


def test_append_value_width_is_msb_first():
	bits = BitBuffer().append(0b101, 3)
	assert bits.to_string() == "101"
	bits = BitBuffer().append(5, 6)
	assert bits.to_string() == "000101"
	# only the low bits are kept
	assert BitBuffer().append(0b11110, 3).to_string() == "110"


def test_append_buffer_leaves_source_intact():
	src = BitBuffer.from_string("1101")
	dst = BitBuffer.from_string("0")
	dst.append(src)
	assert dst.to_string() == "01101"
	assert src.to_string() == "1101"
	dst.pop()
	assert src.count() == 4


def test_pad_to_multiple_of_six():
	bits = BitBuffer.from_string("1011")
	assert bits.pad() == 2
	assert bits.to_string() == "101100"
	assert bits.pad() == 0


def test_pack_known_values():
	assert BitBuffer.from_string("000000").pack() == "A"
	assert BitBuffer.from_string("111111").pack() == "/"
	assert BitBuffer.from_string("011010" "110100").pack() == "a0"
	assert BitBuffer().pack() == ""


def test_pack_requires_multiple_of_six():
	with pytest.raises(ArgumentError):
		BitBuffer.from_string("101").pack()


def test_unpack_every_alphabet_character():
	bits = BitBuffer.unpack(PACKING_ALPHABET)
	assert bits.count() == 64 * 6
	for index in range(64):
		group = 0
		for _ in range(6):
			group = (group << 1) | int(bits.pop())
		assert group == index


def test_unpack_unknown_character():
	with pytest.raises(FormatError):
		BitBuffer.unpack("AB=C")


def test_pack_unpack_roundtrip_random():
	rng = random.Random(7)
	for n_groups in (1, 2, 5, 33):
		bits = BitBuffer(rng.getrandbits(1) for _ in range(n_groups * 6))
		assert BitBuffer.unpack(bits.pack()) == bits


def test_from_string_rejects_other_characters():
	with pytest.raises(FormatError):
		BitBuffer.from_string("10x")
