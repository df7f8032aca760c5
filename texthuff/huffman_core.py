# filename: huffman_core.py

import heapq
import logging
from collections import Counter
from dataclasses import dataclass

from bitarray import bitarray, frozenbitarray

from .errors import ErrorKind, HuffmanError

LINE_TERMINATOR = "\n"
TEXT_ENCODING = "utf-8"
BIT_ORDER = "little"

logger = logging.getLogger(__name__)


def new_code(bits=""):
    return bitarray(bits, endian=BIT_ORDER)


@dataclass
class Leaf:
    count: int
    char: str


@dataclass
class Interior:
    count: int
    # codes relative to this node, not to the final root
    codes: dict


HuffmanNode = Leaf | Interior


def read_lines(source):
    """Yield the lines of a text stream, terminators included."""
    try:
        yield from source
    except UnicodeDecodeError as exc:
        raise HuffmanError(ErrorKind.INVALID_TEXT, detail=str(exc)) from exc


def count_frequencies(lines):
    """Count every character of ``lines``.

    The line terminator always gets an entry, even when the text has none,
    so that the code table can represent every line the encoder emits.
    """
    frequencies = Counter()
    for line in lines:
        frequencies.update(line)
    frequencies[LINE_TERMINATOR] += 0
    return frequencies


def _relative_codes(node: HuffmanNode) -> dict:
    match node:
        case Leaf(char=char):
            return {char: new_code()}
        case Interior(codes=codes):
            return codes


def combine(first, second):
    """Merge two nodes: codes under ``first`` get a leading 0, under ``second`` a 1."""
    codes = {}
    for bit, node in (("0", first), ("1", second)):
        for char, code in _relative_codes(node).items():
            codes[char] = new_code(bit) + code
    return Interior(first.count + second.count, codes)


def build_code_table(frequencies):
    if not frequencies:
        raise ValueError("cannot build a code table from an empty frequency table")

    # (count, lowest code point in the subtree, node); the second key is
    # unique per subtree so nodes themselves are never compared
    priority_queue = [(count, ord(char), Leaf(count, char)) for char, count in frequencies.items()]
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        count1, key1, first = heapq.heappop(priority_queue)
        count2, key2, second = heapq.heappop(priority_queue)
        heapq.heappush(priority_queue, (count1 + count2, min(key1, key2), combine(first, second)))

    _, _, root = priority_queue[0]
    match root:
        case Interior(codes=codes):
            table = codes
        case Leaf(char=char):
            # a lone symbol still gets one bit so the decoder always consumes input
            table = {char: new_code("0")}

    logger.debug("built code table for %d characters", len(table))
    return {char: frozenbitarray(code, endian=BIT_ORDER) for char, code in table.items()}
