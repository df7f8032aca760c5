import io
import os
import random
import string
import sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from texthuff import ErrorKind, HuffmanError, HuffmanService, decode, encode
from texthuff.code_table import parse_code_table

AAAB_STREAM = b"\n00\na1\nb01\n\n\n\x17"

# Fibonacci weights give a lopsided tree whose deepest codes exceed 8 bits,
# so the final byte can always be padded without finishing a code.
FIB_TEXT = "".join(ch * n for ch, n in zip("abcdefghij", (1, 1, 2, 3, 5, 8, 13, 21, 34, 55))) + "\n"


def _get_service():
	return HuffmanService()


def _assert_round_trip(text):
	svc = _get_service()
	data = svc.compress(text)
	out = svc.decompress(data)
	assert out.startswith(text)
	extra = out[len(text):]
	if extra:
		# only possible when every code fits inside the final byte's padding
		table = parse_code_table(io.BytesIO(data))
		width = -sum(len(table[c]) for c in text) % 8
		assert sum(len(table[c]) for c in extra) <= width
		assert max(len(code) for code in table.values()) <= width
	return out


def test_encode_aaab_with_terminator():
	sink = io.BytesIO()
	table = encode(io.StringIO("aaab\n"), sink)
	assert sink.getvalue() == AAAB_STREAM
	assert {c: code.to01() for c, code in table.items()} == {"a": "1", "b": "01", "\n": "00"}


def test_decode_aaab_with_terminator():
	sink = io.BytesIO()
	decode(io.BytesIO(AAAB_STREAM), sink)
	assert sink.getvalue() == b"aaab\n"


def test_unterminated_line_example():
	svc = _get_service()
	data = svc.compress("aaab")
	assert data.startswith(b"\n00\na1\nb01\n\n\n")
	table = parse_code_table(io.BytesIO(data))
	assert len(table["a"]) == 1
	assert len(table["b"]) == 2 and len(table["\n"]) == 2
	assert _get_service().compress("aaab") == data
	_assert_round_trip("aaab")


def test_encode_rewinds_source():
	source = io.StringIO("hello\nworld\n")
	sink = io.BytesIO()
	encode(source, sink)
	assert source.read() == ""
	sink.seek(0)
	out = io.BytesIO()
	decode(sink, out)
	assert out.getvalue().startswith(b"hello\nworld\n")


def test_empty_input():
	svc = _get_service()
	data = svc.compress("")
	assert data == b"\n0\n\n\n"
	assert svc.decompress(data) == ""


def test_compress_is_deterministic():
	svc = _get_service()
	assert svc.compress(FIB_TEXT) == svc.compress(FIB_TEXT)


def test_round_trip_exact_with_deep_codes():
	assert _assert_round_trip(FIB_TEXT) == FIB_TEXT
	chars = list(FIB_TEXT)
	random.Random(7).shuffle(chars)
	shuffled = "".join(chars)
	assert _assert_round_trip(shuffled) == shuffled


def test_round_trip_small_inputs():
	for text in ("a", "ab", "abc\n", "\n", "\n\n\n", "hello world\n", "ünïcödé €\nline two"):
		_assert_round_trip(text)


def test_round_trip_keeps_carriage_returns():
	_assert_round_trip("first line\r\nsecond line\r\n" * 20)


@pytest.mark.timeout(120)
def test_round_trip_large_random_text():
	rng = random.Random(2024)
	alphabet = string.ascii_letters + string.digits + string.punctuation + " " * 10 + "\n" * 2
	text = "".join(rng.choice(alphabet) for _ in range(200_000))
	_assert_round_trip(text)


def test_compressed_text_is_smaller():
	text = "the quick brown fox jumps over the lazy dog\n" * 200
	assert len(_get_service().compress(text)) < len(text.encode("utf-8"))


def test_corrupted_header():
	data = bytearray(_get_service().compress("Hello World\n" * 50))
	data[0] ^= 0xFF
	with pytest.raises(HuffmanError):
		_get_service().decompress(bytes(data))


def test_truncated_header():
	data = _get_service().compress("This is a test\n" * 100)
	header_end = data.index(b"\n\n\n")
	with pytest.raises(HuffmanError) as excinfo:
		_get_service().decompress(data[:header_end])
	assert excinfo.value.kind is ErrorKind.MALFORMED_TABLE


def test_sink_errors_propagate():
	class BrokenSink:
		def write(self, data):
			raise OSError("disk full")

	with pytest.raises(OSError):
		encode(io.StringIO("abc\n"), BrokenSink())


def test_invalid_text_source():
	source = io.TextIOWrapper(io.BytesIO(b"abc\n\xc3\x28\n"), encoding="utf-8")
	with pytest.raises(HuffmanError) as excinfo:
		encode(source, io.BytesIO())
	assert excinfo.value.kind is ErrorKind.INVALID_TEXT


def test_file_round_trip(tmp_path):
	original = tmp_path / "book.txt"
	packed = tmp_path / "book.huffman"
	restored = tmp_path / "book.out"
	# same weights as FIB_TEXT, with "\r" taking the place of "a"
	text = "".join(ch * n for ch, n in zip("bcdefghij", (1, 2, 3, 5, 8, 13, 21, 34, 55))) + "\r\n"
	original.write_bytes(text.encode("utf-8"))

	svc = _get_service()
	svc.compress_file(original, packed)
	svc.decompress_file(packed, restored)
	assert restored.read_bytes() == original.read_bytes()


def test_round_trip_exact_for_newline_only_text():
	svc = _get_service()
	for text in ("\n", "\n\n", "\n\n\n", "\n" * 9):
		assert svc.decompress(svc.compress(text)) == text
