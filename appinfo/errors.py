"""
Decode errors.

All errors subclass ValueError so callers that only care about "bad input"
can catch that. Each carries the byte offset where decoding failed.
"""

from __future__ import annotations


class AppInfoError(ValueError):
    """Base class for appinfo decode failures."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class BadMagic(AppInfoError):
    """Header magic does not match MAGIC."""

    def __init__(self, value: int, offset: int = 0) -> None:
        super().__init__(f"Invalid magic number 0x{value:08x}", offset)
        self.value = value


class Truncated(AppInfoError):
    """Fewer bytes remain than a fixed field or declared length needs."""

    def __init__(self, what: str, needed: int, available: int, offset: int | None = None) -> None:
        super().__init__(f"Truncated {what}: need {needed} bytes, have {available}", offset)
        self.needed = needed
        self.available = available


class UnterminatedString(AppInfoError):
    """No null terminator in the remaining bytes."""

    def __init__(self, offset: int | None = None) -> None:
        super().__init__("Unterminated string", offset)


class UnknownNodeTag(AppInfoError):
    def __init__(self, tag: int, offset: int | None = None) -> None:
        super().__init__(f"Unrecognized node tag 0x{tag:02x}", offset)
        self.tag = tag


class TrailingBytes(AppInfoError):
    """Strict mode: bytes left over after a complete structure."""

    def __init__(self, what: str, count: int, offset: int | None = None) -> None:
        super().__init__(f"{count} trailing bytes after {what}", offset)
        self.count = count
