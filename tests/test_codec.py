import random

import pytest

from frequency import FrequencyEntry, format_table, parse_table
from huffman_codec import CompressedText, compress, compute_frequencies, decompress
from huffman_errors import ArgumentError, FormatError, KeyNotFoundError, UnderflowError

SAMPLE_TABLE = "a:5\nb:2\nc:1\nd:1"


@pytest.mark.parametrize("plaintext", [
	"abracadabra",
	"Hello World\r\nsecond line: with colons::\n",
	"a",
	"\n\n\n",
	"The quick brown fox jumps over the lazy dog. " * 20,
])
def test_roundtrip_with_computed_table(plaintext):
	table = compute_frequencies(plaintext)
	compressed = compress(plaintext, table)
	assert decompress(compressed, table) == plaintext


def test_roundtrip_random_text():
	rng = random.Random(11)
	alphabet = "abcdefgh \n\r:"
	for size in (1, 2, 3, 17, 500):
		plaintext = "".join(rng.choice(alphabet) for _ in range(size))
		table = compute_frequencies(plaintext)
		assert decompress(compress(plaintext, table), table) == plaintext


def test_roundtrip_with_wider_table_and_fractional_weights():
	table = [FrequencyEntry("a", 0.5), FrequencyEntry("b", 0.25), FrequencyEntry("c", 0.125), FrequencyEntry("z", 3)]
	for plaintext in ("abc", "cab", "b", "zzzzzzzz", "cbcbcbcba"):
		assert decompress(compress(plaintext, table), table) == plaintext


def test_compute_frequencies_table_text():
	assert compute_frequencies("aab\n") == "a:2\nb:1\nnewline:1"
	assert compute_frequencies("") == ""


def test_compressed_text_format():
	compressed = compress("abcd", SAMPLE_TABLE)
	# 0 11 101 100 -> 011101 100 + pad -> "011101" "100000"
	assert compressed == "dg"
	assert isinstance(compressed, CompressedText)
	assert compressed.bit_count == 9
	assert compressed.pad_bits == 3


def test_empty_plaintext():
	compressed = compress("", SAMPLE_TABLE)
	assert compressed == ""
	assert compressed.bit_count == 0
	assert decompress(compressed, SAMPLE_TABLE) == ""
	assert decompress("", SAMPLE_TABLE) == ""


def test_single_symbol_table():
	compressed = compress("xxxx", "x:10")
	assert compressed == "8" # 1111 + 00
	assert decompress(compressed, "x:10") == "xxxx"
	assert decompress(str(compressed), "x:10") == "xxxx"


def test_single_symbol_table_rejects_zero_group():
	with pytest.raises(FormatError):
		decompress("A", "x:10")


def test_unknown_plaintext_symbol():
	with pytest.raises(KeyNotFoundError):
		compress("abz", SAMPLE_TABLE)


def test_unknown_packed_character():
	with pytest.raises(FormatError):
		decompress("dg*", SAMPLE_TABLE)


def test_malformed_table():
	with pytest.raises(FormatError):
		compress("a", "a-5")


def test_empty_table():
	with pytest.raises(ArgumentError):
		compress("", "")


def test_table_entries_and_text_are_interchangeable():
	plaintext = "bad cab"
	table = compute_frequencies(plaintext)
	assert compress(plaintext, table) == compress(plaintext, parse_table(table))


def test_explicit_bit_count_for_plain_string():
	compressed = compress("b", SAMPLE_TABLE)
	assert decompress(str(compressed), SAMPLE_TABLE, bit_count=compressed.bit_count) == "b"


def test_pad_terminated_decoding_reads_pad_as_symbols():
	# without a bit count the zero pad spells "a" (code 0) four times
	compressed = compress("b", SAMPLE_TABLE)
	assert decompress(str(compressed), SAMPLE_TABLE) == "baaaa"
	assert decompress(compressed, SAMPLE_TABLE) == "b"


def test_pad_terminated_underflow_on_cut_code():
	# 101 010 -> c, a, then "10" ends inside the tree
	with pytest.raises(UnderflowError):
		decompress("q", SAMPLE_TABLE)


def test_code_running_into_pad():
	# "101000" decoded with 2 meaningful bits: c needs 3
	with pytest.raises(UnderflowError):
		decompress("o", SAMPLE_TABLE, bit_count=2)


@pytest.mark.parametrize("bit_count", [-1, 0, 7, 10])
def test_impossible_bit_count(bit_count):
	with pytest.raises(ArgumentError):
		decompress("o", SAMPLE_TABLE, bit_count=bit_count)


def test_calls_do_not_share_state():
	first = compress("abcd", SAMPLE_TABLE)
	compress("dddd", "d:1\ne:1")
	assert compress("abcd", SAMPLE_TABLE) == first


def test_roundtrip_on_very_deep_tree():
	# doubling weights give a chain about a thousand levels deep
	entries = [FrequencyEntry(chr(0x100), 1)] + [FrequencyEntry(chr(0x101 + i), 2 ** i) for i in range(1022)]
	table = format_table(entries)
	plaintext = "".join(e.symbol for e in entries[:4] + entries[-4:]) * 2
	compressed = compress(plaintext, table)
	assert compressed.bit_count > 1000
	assert decompress(compressed, table) == plaintext
