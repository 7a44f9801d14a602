"""appinfo - decode, edit and re-encode appinfo.vdf metadata caches."""

from appinfo.document import Container, Document, Header, IntValue, Node, Section, StringValue
from appinfo.errors import AppInfoError, BadMagic, TrailingBytes, Truncated, UnknownNodeTag, UnterminatedString
from appinfo.reader import AppInfoReader
from appinfo.writer import AppInfoWriter

__version__ = "1.0.0"

__all__ = [
    "AppInfoError",
    "AppInfoReader",
    "AppInfoWriter",
    "BadMagic",
    "Container",
    "Document",
    "Header",
    "IntValue",
    "Node",
    "Section",
    "StringValue",
    "TrailingBytes",
    "Truncated",
    "UnknownNodeTag",
    "UnterminatedString",
]
