# filename: bitstream.py

import logging

from bitarray import frozenbitarray

from .errors import ErrorKind, HuffmanError
from .huffman_core import BIT_ORDER, TEXT_ENCODING, new_code

READ_CHUNK_SIZE = 64 * 1024

logger = logging.getLogger(__name__)


def padding_for(table, width):
    """Return ``width`` filler bits for the last byte of a body.

    Zeros are used when they stop short of every code. Otherwise the filler
    is a prefix of the first code (by character) longer than ``width``, so the
    decoder is left holding an unfinished code and drops it. A table with a
    bit path that no code follows gets that path, which the decoder also
    drops in the last byte. When neither exists, any filler completes some
    code and zeros are used.
    """
    zeros = new_code("0" * width)
    if not width:
        return zeros
    longer = [code for _, code in sorted(table.items()) if len(code) > width]
    if any(code[:width] == zeros for code in longer):
        return zeros
    if longer:
        return new_code(longer[0][:width].to01())
    path = _path_off_trie(DecodingTrie(table), width)
    if path is None:
        return zeros
    return path + new_code("0" * (width - len(path)))


def _path_off_trie(trie, width):
    """Shortest path of at most ``width`` bits that leaves ``trie`` before any code ends."""
    frontier = [(trie.root, new_code())]
    while frontier:
        node, path = frontier.pop(0)
        if len(path) >= width:
            return None
        for bit in (0, 1):
            step = path + new_code(str(bit))
            child = node.children[bit]
            if child is None:
                return step
            if child.char is None:
                frontier.append((child, step))
    return None


def encode_body(table, lines, sink):
    """Pack the codes of every character in ``lines`` into ``sink``.

    Bits are packed least significant bit first in the order they are
    produced. Returns the number of bytes written.
    """
    buffer = new_code()
    written = 0
    for line in lines:
        for char in line:
            try:
                buffer.extend(table[char])
            except KeyError:
                raise HuffmanError(ErrorKind.UNKNOWN_CHARACTER, detail=repr(char)) from None
        if len(buffer) > 8:
            split = len(buffer) - len(buffer) % 8
            sink.write(buffer[:split].tobytes())
            del buffer[:split]
            written += split // 8

    if buffer:
        buffer.extend(padding_for(table, -len(buffer) % 8))
        sink.write(buffer.tobytes())
        written += len(buffer) // 8
    return written


class _TrieNode:
    __slots__ = ("children", "char")

    def __init__(self):
        self.children = [None, None]
        self.char = None


class DecodingTrie:
    """Binary prefix tree over a code table; each bit read descends one edge."""

    def __init__(self, table):
        self.root = _TrieNode()
        self.depth = 0
        for char, code in sorted(table.items()):
            self.insert(char, code)

    def insert(self, char, code):
        if not code:
            raise HuffmanError(ErrorKind.MALFORMED_TABLE, frozenbitarray(code, endian=BIT_ORDER),
                               detail=f"zero-length code for {char!r}")
        node = self.root
        for bit in code:
            if node.char is not None:
                break
            if node.children[bit] is None:
                node.children[bit] = _TrieNode()
            node = node.children[bit]
        if node.char is not None or node.children != [None, None]:
            raise HuffmanError(ErrorKind.MALFORMED_TABLE, frozenbitarray(code, endian=BIT_ORDER),
                               detail=f"code for {char!r} clashes with another code")
        node.char = char
        self.depth = max(self.depth, len(code))


def decode_body(table, source, sink):
    """Decode the body bytes of ``source`` into UTF-8 text written to ``sink``.

    Bits left over at the end of input are padding and are dropped, including
    bits that step off the trie inside the final byte. Stepping off the trie
    anywhere earlier is a ``RUNAWAY_CODE`` error. Returns the number of bytes
    written.
    """
    trie = DecodingTrie(table)
    node = trie.root
    candidate = new_code()
    dead_end = None
    written = 0
    for chunk in iter(lambda: source.read(READ_CHUNK_SIZE), b""):
        if dead_end is not None:
            _raise_runaway(trie, dead_end)
        bits = new_code()
        bits.frombytes(chunk)
        decoded = []
        for index, bit in enumerate(bits):
            candidate.append(bit)
            node = node.children[bit]
            if node is None:
                # no code starts with the candidate; only padding may follow
                dead_end = frozenbitarray(candidate, endian=BIT_ORDER)
                if index // 8 < len(chunk) - 1:
                    _raise_runaway(trie, dead_end)
                break
            if node.char is not None:
                decoded.append(node.char)
                node = trie.root
                candidate.clear()
        if decoded:
            data = "".join(decoded).encode(TEXT_ENCODING)
            sink.write(data)
            written += len(data)

    if candidate:
        logger.debug("dropped %d trailing padding bits", len(candidate))
    return written


def _raise_runaway(trie, bitpattern):
    raise HuffmanError(ErrorKind.RUNAWAY_CODE, bitpattern, detail=f"longest code is {trie.depth} bits")
