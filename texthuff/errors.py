# filename: errors.py

import enum


class ErrorKind(enum.Enum):
    MALFORMED_TABLE = "malformed code table"
    RUNAWAY_CODE = "no code matches the bit stream"
    INVALID_TEXT = "invalid text encoding"
    UNKNOWN_CHARACTER = "character missing from the code table"


class HuffmanError(Exception):
    """Raised when a code table or an encoded stream cannot be processed.

    ``bitpattern`` holds the bits collected right before the failure (a
    frozenbitarray), or None when the failure is not about a bit pattern.
    """

    def __init__(self, kind, bitpattern=None, detail=None):
        self.kind = kind
        self.bitpattern = bitpattern
        self.detail = detail
        message = kind.value
        if bitpattern is not None:
            message += f" (bits: {bitpattern.to01() or '<empty>'})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
