"""
appinfo document model.

Everything here is immutable: a decoded Document is never modified in place,
edits (see appinfo.editor) build new objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from appinfo.spec import (
    DIGEST_SIZE,
    MAGIC,
    NODE_CONTAINER,
    NODE_INT,
    NODE_STRING,
    U32_MAX,
    U64_MAX,
)


_EXHAUSTED = object()


def _check_cstring(value: object, what: str) -> None:
    if not isinstance(value, bytes):
        raise ValueError(f"{what} must be bytes, got {type(value).__name__}")
    if b"\x00" in value:
        raise ValueError(f"{what} cannot contain a null byte: {value!r}")


def _check_uint(value: object, maximum: int, what: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= maximum:
        raise ValueError(f"{what} out of range: {value!r}")


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Container:
    """Named, ordered list of child nodes."""

    name: bytes
    children: tuple[Node, ...] = ()

    tag = NODE_CONTAINER

    def __post_init__(self) -> None:
        _check_cstring(self.name, "Node name")
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def get(self, name: bytes) -> Node | None:
        """First direct child with the given name, or None."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def walk(self) -> Iterator[Node]:
        """Yield every descendant, depth-first, in wire order."""
        stack = [iter(self.children)]
        while stack:
            node = next(stack[-1], _EXHAUSTED)
            if node is _EXHAUSTED:
                stack.pop()
                continue
            yield node
            if isinstance(node, Container):
                stack.append(iter(node.children))


@dataclass(frozen=True)
class StringValue:
    name: bytes
    value: bytes

    tag = NODE_STRING

    def __post_init__(self) -> None:
        _check_cstring(self.name, "Node name")
        _check_cstring(self.value, "String value")


@dataclass(frozen=True)
class IntValue:
    name: bytes
    value: int

    tag = NODE_INT

    def __post_init__(self) -> None:
        _check_cstring(self.name, "Node name")
        _check_uint(self.value, U32_MAX, "Integer value")


Node = Union[Container, StringValue, IntValue]


# =============================================================================
# Header / Section / Document
# =============================================================================

@dataclass(frozen=True)
class Header:
    magic: int = MAGIC
    version: int = 0

    def __post_init__(self) -> None:
        _check_uint(self.magic, U32_MAX, "magic")
        _check_uint(self.version, U32_MAX, "version")


_ZERO_DIGEST = bytes(DIGEST_SIZE)


@dataclass(frozen=True)
class Section:
    """
    One application's metadata block.

    data_size is the body length declared on the wire when the section was
    decoded (None when built in memory). It is informational only: the writer
    always measures the body it emits.
    """

    app_id: int
    info_state: int = 0
    last_updated: int = 0
    pics_token: int = 0
    sha1: bytes = _ZERO_DIGEST
    binary_sha1: bytes = _ZERO_DIGEST
    change_number: int = 0
    nodes: tuple[Node, ...] = ()
    data_size: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in ("app_id", "info_state", "last_updated", "change_number"):
            _check_uint(getattr(self, name), U32_MAX, name)
        _check_uint(self.pics_token, U64_MAX, "pics_token")
        for name in ("sha1", "binary_sha1"):
            digest = getattr(self, name)
            if not isinstance(digest, bytes) or len(digest) != DIGEST_SIZE:
                raise ValueError(f"{name} must be {DIGEST_SIZE} bytes, got {digest!r}")
        if not isinstance(self.nodes, tuple):
            object.__setattr__(self, "nodes", tuple(self.nodes))

    def get(self, name: bytes) -> Node | None:
        """First top-level node with the given name, or None."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None


@dataclass(frozen=True)
class Document:
    """A whole appinfo file: header plus ordered sections."""

    header: Header = field(default_factory=Header)
    sections: tuple[Section, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.sections, tuple):
            object.__setattr__(self, "sections", tuple(self.sections))

    def get_section(self, app_id: int) -> Section | None:
        """Get the first section for an app id. Returns None if absent."""
        for section in self.sections:
            if section.app_id == app_id:
                return section
        return None

    def get_sections(self, app_id: int) -> list[Section]:
        """Get all sections for an app id (ids are not required to be unique)."""
        return [s for s in self.sections if s.app_id == app_id]

    @property
    def app_ids(self) -> list[int]:
        return [s.app_id for s in self.sections]

    def to_bytes(self) -> bytes:
        from appinfo.writer import AppInfoWriter
        return AppInfoWriter.serialize(self)

    def write(self, path: str | Path) -> int:
        """Write to disk. Returns the number of bytes written."""
        from appinfo.writer import AppInfoWriter
        return AppInfoWriter.write(self, path)

    def __repr__(self) -> str:
        return (
            f"Document(version={self.header.version}, "
            f"sections={self.app_ids})"
        )
