from .errors import ErrorKind, HuffmanError
from .huffman_service import HuffmanService, decode, encode

__all__ = ["ErrorKind", "HuffmanError", "HuffmanService", "decode", "encode"]
