# filename: code_table.py

import logging

from bitarray import frozenbitarray

from .errors import ErrorKind, HuffmanError
from .huffman_core import BIT_ORDER, LINE_TERMINATOR, TEXT_ENCODING, new_code

HEADER_END = b"\n\n"

logger = logging.getLogger(__name__)


def serialize_code_table(table):
    """Render ``table`` as header lines sorted by code point, end marker included.

    Each line is the character's UTF-8 bytes followed by its code as ASCII
    digits. The line terminator's own entry comes out as an empty line
    followed by a line holding only its digits.
    """
    buffer = bytearray()
    for char in sorted(table):
        code = table[char]
        if char == LINE_TERMINATOR and not code:
            raise HuffmanError(ErrorKind.MALFORMED_TABLE, frozenbitarray(code, endian=BIT_ORDER),
                               detail="the line terminator needs a non-empty code")
        buffer += char.encode(TEXT_ENCODING)
        buffer += code.to01().encode("ascii")
        buffer += b"\n"
    buffer += HEADER_END
    return bytes(buffer)


def write_code_table(table, sink):
    header = serialize_code_table(table)
    sink.write(header)
    logger.debug("wrote %d byte header for %d characters", len(header), len(table))
    return len(header)


def _read_header_line(source):
    raw = source.readline()
    if not raw.endswith(b"\n"):
        raise HuffmanError(ErrorKind.MALFORMED_TABLE, detail="header ends before its end marker")
    try:
        return raw[:-1].decode(TEXT_ENCODING)
    except UnicodeDecodeError as exc:
        raise HuffmanError(ErrorKind.INVALID_TEXT, detail=str(exc)) from exc


def _parse_digits(digits):
    code = new_code()
    for digit in digits:
        if digit == "0":
            code.append(0)
        elif digit == "1":
            code.append(1)
        else:
            raise HuffmanError(ErrorKind.MALFORMED_TABLE, frozenbitarray(code, endian=BIT_ORDER),
                               detail=f"unexpected digit {digit!r}")
    return frozenbitarray(code, endian=BIT_ORDER)


def parse_code_table(source):
    """Read a header from the binary stream ``source``.

    Leaves ``source`` positioned on the first body byte.
    """
    table = {}
    while True:
        line = _read_header_line(source)
        if line:
            char, digits = line[0], line[1:]
        else:
            # an empty line either ends the header or introduces the
            # terminator's entry on the next line
            line = _read_header_line(source)
            if not line:
                break
            char, digits = LINE_TERMINATOR, line
        table[char] = _parse_digits(digits)

    logger.debug("parsed code table for %d characters", len(table))
    return table
