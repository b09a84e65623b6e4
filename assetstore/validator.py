# assetstore/validator.py
"""
String validation for names and colors.

Validators decide which strings may enter the registry. Once a group or
category name has been accepted it is never validated again.
"""

from abc import ABC, abstractmethod

# Digits, letters, space and the punctuation used by CSS colors and names.
ALLOWED_CHARS = frozenset(
    b"0123456789"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"abcdefghijklmnopqrstuvwxyz"
    b" #(),-."
)


class Validator(ABC):
    """
    Base class for string validators.

    Subclasses implement validate() and sanitize_for_embedding().
    """

    @abstractmethod
    def validate(self, data: bytes) -> bool:
        """Return True if every byte of data is acceptable."""
        pass

    @abstractmethod
    def sanitize_for_embedding(self, text: str) -> bytes:
        """Return text made safe for embedding in a quoted JSON string."""
        pass

    def validate_str(self, text: str) -> bool:
        return self.validate(text.encode("utf-8"))


class CharsetValidator(Validator):
    """
    Whitelist validator over a small printable character set.

    Usage:
        validator = CharsetValidator()
        validator.validate(b"#FF0000")   # True
        validator.validate(b"<script>")  # False
    """

    def __init__(self, allowed: frozenset = ALLOWED_CHARS):
        self.allowed = allowed

    def validate(self, data: bytes) -> bool:
        return all(b in self.allowed for b in data)

    def sanitize_for_embedding(self, text: str) -> bytes:
        """
        Escape backslash and double quote, drop control codes below 0x20.

        Args:
            text: Free text such as a minter name

        Returns:
            UTF-8 bytes safe to place between double quotes
        """
        out = bytearray()
        for b in text.encode("utf-8"):
            if b < 0x20:
                continue
            if b in (0x5C, 0x22):  # \ and "
                out.append(0x5C)
            out.append(b)
        return bytes(out)
