# filename: huffman_service.py

import io
import logging

from .bitstream import decode_body, encode_body
from .code_table import parse_code_table, write_code_table
from .huffman_core import TEXT_ENCODING, build_code_table, count_frequencies, read_lines

logger = logging.getLogger(__name__)


def encode(source, sink):
    """Compress the seekable text stream ``source`` into the binary ``sink``.

    The source is read twice: once to count characters, then again from the
    start to emit the body. Returns the code table that was used.
    """
    frequencies = count_frequencies(read_lines(source))
    table = build_code_table(frequencies)
    header_size = write_code_table(table, sink)
    source.seek(0)
    body_size = encode_body(table, read_lines(source), sink)
    logger.info("encoded %d distinct characters: %d byte header, %d byte body",
                len(table), header_size, body_size)
    return table


def decode(source, sink):
    """Decompress the binary stream ``source`` into UTF-8 bytes on ``sink``."""
    table = parse_code_table(source)
    text_size = decode_body(table, source, sink)
    logger.info("decoded %d bytes of text using %d codes", text_size, len(table))
    return table


class HuffmanService:
    def compress(self, text):
        sink = io.BytesIO()
        encode(io.StringIO(text), sink)
        return sink.getvalue()

    def decompress(self, data):
        sink = io.BytesIO()
        decode(io.BytesIO(data), sink)
        return sink.getvalue().decode(TEXT_ENCODING)

    def compress_file(self, input_path, output_path):
        # newline="" keeps "\r\n" and lone "\r" as they are on disk
        with open(input_path, "r", encoding=TEXT_ENCODING, newline="") as source, \
                open(output_path, "wb") as sink:
            return encode(source, sink)

    def decompress_file(self, input_path, output_path):
        with open(input_path, "rb") as source, open(output_path, "wb") as sink:
            return decode(source, sink)
