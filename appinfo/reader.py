"""
appinfo Reader - Parser for appinfo.vdf files.

Features:
  - Magic check on the first 4 bytes (instant file identification)
  - Single pass, in-memory decode of header, sections and node trees
  - Node trees decoded with an explicit stack (nesting depth is not bounded
    by the interpreter's recursion limit)
  - Lenient by default: a malformed trailing section or node list ends that
    list early and keeps what was decoded; strict=True raises instead
  - Section index for lazy, per-app decoding of large files

All decode functions take the whole buffer plus an offset (and optionally an
end bound) and return (value, new_offset), so error offsets are absolute.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple

from appinfo.document import Container, Document, Header, IntValue, Node, Section, StringValue
from appinfo.errors import AppInfoError, BadMagic, Truncated, TrailingBytes, UnknownNodeTag, UnterminatedString
from appinfo.spec import (
    MAGIC,
    MAX_MAGIC_SCAN_BYTES,
    NODE_CONTAINER,
    NODE_END,
    NODE_INT,
    NODE_KINDS,
    NODE_STRING,
    SECTION_FIXED,
    SECTIONS_END,
    U32,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Primitives
# =============================================================================

def _require(data: bytes, offset: int, end: int, size: int, what: str) -> None:
    available = max(end - offset, 0)
    if available < size:
        raise Truncated(what, size, available, offset)


def _read_u32(data: bytes, offset: int, end: int, what: str) -> tuple[int, int]:
    _require(data, offset, end, U32.size, what)
    return U32.unpack_from(data, offset)[0], offset + U32.size


def decode_string(data: bytes, offset: int = 0, end: int | None = None) -> tuple[bytes, int]:
    """Read a null-terminated byte string. The terminator is consumed, not returned."""
    if end is None:
        end = len(data)
    terminator = data.find(b"\x00", offset, end)
    if terminator < 0:
        raise UnterminatedString(offset)
    return bytes(data[offset:terminator]), terminator + 1


def decode_header(data: bytes, offset: int = 0) -> tuple[Header, int]:
    """Read magic and version. Raises BadMagic before looking at the version."""
    end = len(data)
    magic, pos = _read_u32(data, offset, end, "header magic")
    if magic != MAGIC:
        raise BadMagic(magic, offset)
    version, pos = _read_u32(data, pos, end, "header version")
    return Header(magic=magic, version=version), pos


# =============================================================================
# Node tree
# =============================================================================

def decode_nodes(
    data: bytes,
    offset: int = 0,
    end: int | None = None,
    *,
    strict: bool = False,
) -> tuple[tuple[Node, ...], int]:
    """
    Decode one node list, including its end tag and every nested list.

    Containers are tracked on an explicit stack of (name, parent list) frames.
    In lenient mode a failure ends the list at the start of the failing node:
    open containers are closed with the children they already have.
    """
    if end is None:
        end = len(data)

    frames: list[tuple[bytes, list[Node]]] = []
    nodes: list[Node] = []
    pos = offset

    while True:
        start = pos
        try:
            _require(data, pos, end, 1, "node tag")
            tag = data[pos]
            pos += 1

            if tag == NODE_END:
                if not frames:
                    return tuple(nodes), pos
                name, parent = frames.pop()
                parent.append(Container(name, tuple(nodes)))
                nodes = parent
                continue

            if tag not in NODE_KINDS:
                raise UnknownNodeTag(tag, start)

            name, pos = decode_string(data, pos, end)
            if tag == NODE_CONTAINER:
                frames.append((name, nodes))
                nodes = []
            elif tag == NODE_STRING:
                value, pos = decode_string(data, pos, end)
                nodes.append(StringValue(name, value))
            elif tag == NODE_INT:
                value, pos = _read_u32(data, pos, end, "integer value")
                nodes.append(IntValue(name, value))
        except AppInfoError as exc:
            if strict:
                raise
            logger.warning("Node list ended early at offset %d: %s", start, exc)
            while frames:
                name, parent = frames.pop()
                parent.append(Container(name, tuple(nodes)))
                nodes = parent
            return tuple(nodes), start


# =============================================================================
# Sections
# =============================================================================

def _read_frame(data: bytes, offset: int, end: int) -> tuple[int, int, int]:
    """Read app_id and body length. Returns (app_id, body_offset, body_length)."""
    app_id, pos = _read_u32(data, offset, end, "section app_id")
    length, pos = _read_u32(data, pos, end, "section length")
    _require(data, pos, end, length, f"section {app_id} body")
    return app_id, pos, length


def decode_section(data: bytes, offset: int = 0, *, strict: bool = False) -> tuple[Section, int]:
    """Decode one length-framed section. Never reads past the declared body."""
    app_id, body, length = _read_frame(data, offset, len(data))
    body_end = body + length

    _require(data, body, body_end, SECTION_FIXED.size, f"section {app_id} fixed fields")
    info_state, last_updated, pics_token, sha1, binary_sha1, change_number = SECTION_FIXED.unpack_from(data, body)

    nodes, nodes_end = decode_nodes(data, body + SECTION_FIXED.size, body_end, strict=strict)
    if nodes_end != body_end:
        if strict:
            raise TrailingBytes(f"section {app_id} node tree", body_end - nodes_end, nodes_end)
        logger.debug("Section %d: ignoring %d bytes after node tree", app_id, body_end - nodes_end)

    section = Section(
        app_id=app_id,
        info_state=info_state,
        last_updated=last_updated,
        pics_token=pics_token,
        sha1=sha1,
        binary_sha1=binary_sha1,
        change_number=change_number,
        nodes=nodes,
        data_size=length,
    )
    return section, body_end


def decode_sections(data: bytes, offset: int = 0, *, strict: bool = False) -> tuple[tuple[Section, ...], int]:
    """Decode sections up to and including the 4-byte zero sentinel."""
    sections: list[Section] = []
    pos = offset
    while True:
        if data[pos:pos + len(SECTIONS_END)] == SECTIONS_END:
            return tuple(sections), pos + len(SECTIONS_END)
        try:
            section, pos = decode_section(data, pos, strict=strict)
        except AppInfoError as exc:
            if strict:
                raise
            logger.warning("Section list ended early at offset %d after %d sections: %s", pos, len(sections), exc)
            return tuple(sections), pos
        sections.append(section)


def decode_document(data: bytes, *, strict: bool = False) -> Document:
    data = bytes(data)
    header, pos = decode_header(data)
    sections, pos = decode_sections(data, pos, strict=strict)
    if pos != len(data):
        if strict:
            raise TrailingBytes("end of sections", len(data) - pos, pos)
        logger.debug("Ignoring %d bytes after offset %d", len(data) - pos, pos)
    logger.debug("Decoded %d sections (version %d)", len(sections), header.version)
    return Document(header=header, sections=sections)


# =============================================================================
# Reader
# =============================================================================

class SectionFrame(NamedTuple):
    """Where a section sits in the file: frame start and declared body length."""

    app_id: int
    offset: int
    length: int


class SectionIndex:
    """
    Section frames in file order, with per-app lookup.

    app ids may repeat; every frame is kept and get() returns the first one,
    matching Document.get_section.
    """

    def __init__(self) -> None:
        self.frames: list[SectionFrame] = []
        self._by_app: dict[int, list[SectionFrame]] = {}

    def add(self, app_id: int, offset: int, length: int) -> SectionFrame:
        frame = SectionFrame(app_id, offset, length)
        self.frames.append(frame)
        self._by_app.setdefault(app_id, []).append(frame)
        return frame

    def get(self, app_id: int) -> SectionFrame | None:
        frames = self._by_app.get(app_id)
        return frames[0] if frames else None

    def get_all(self, app_id: int) -> list[SectionFrame]:
        return list(self._by_app.get(app_id, ()))

    @property
    def app_ids(self) -> list[int]:
        """App ids in file order, repeats included (same as Document.app_ids)."""
        return [frame.app_id for frame in self.frames]

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._by_app

    def __iter__(self) -> Iterator[SectionFrame]:
        return iter(self.frames)

    def __len__(self) -> int:
        return len(self.frames)


class AppInfoReader:
    """
    appinfo.vdf reader.

    Usage:
        # Full parse
        doc = AppInfoReader.read("appinfo.vdf")

        # Indexed access (only decodes the sections you ask for)
        with AppInfoReader.open("appinfo.vdf") as reader:
            section = reader.get_section(33362)
    """

    @staticmethod
    def is_appinfo(path: str | Path) -> bool:
        """Fast check if a file is an appinfo file. Reads only the magic."""
        with open(path, "rb") as f:
            head = f.read(MAX_MAGIC_SCAN_BYTES)
        return AppInfoReader.is_appinfo_bytes(head)

    @staticmethod
    def is_appinfo_bytes(data: bytes) -> bool:
        return len(data) >= U32.size and U32.unpack_from(data, 0)[0] == MAGIC

    @classmethod
    def read(cls, path: str | Path, *, strict: bool = False, max_size: int | None = None) -> Document:
        """Fully parse an appinfo file into a Document."""
        if max_size is not None:
            size = Path(path).stat().st_size
            if size > max_size:
                raise ValueError(f"File size {size} exceeds maximum of {max_size} bytes: {path}")
        with open(path, "rb") as f:
            data = f.read()
        logger.debug("Read %d bytes from %s", len(data), path)
        return cls.parse(data, strict=strict)

    @classmethod
    def parse(cls, data: bytes, *, strict: bool = False) -> Document:
        return decode_document(data, strict=strict)

    @classmethod
    def open(cls, path: str | Path, *, strict: bool = False) -> AppInfoReaderHandle:
        """Open an appinfo file for indexed, lazy reading."""
        f = builtins_open(path, "rb")
        try:
            raw = f.read()
            reader = AppInfoReaderHandle(f, raw, strict=strict)
            reader._scan()
        except BaseException:
            f.close()
            raise
        return reader


# Keep builtins reference so 'open' classmethod doesn't shadow
import builtins
builtins_open = builtins.open


class AppInfoReaderHandle:
    """
    Handle for indexed access to an appinfo file.

    Only section frames are scanned up front; a section's body is decoded
    when it is requested.
    """

    def __init__(self, handle: BinaryIO, raw: bytes, *, strict: bool = False) -> None:
        self._handle = handle
        self._raw = raw
        self.strict = strict
        self.header: Header | None = None
        self.index: SectionIndex = SectionIndex()

    def _scan(self) -> None:
        raw = self._raw
        self.header, pos = decode_header(raw)
        while True:
            if raw[pos:pos + len(SECTIONS_END)] == SECTIONS_END:
                break
            try:
                app_id, body, length = _read_frame(raw, pos, len(raw))
            except AppInfoError as exc:
                if self.strict:
                    raise
                logger.warning("Section scan ended early at offset %d: %s", pos, exc)
                break
            self.index.add(app_id, pos, length)
            pos = body + length
        logger.debug("Indexed %d sections", len(self.index))

    def get_section(self, app_id: int) -> Section | None:
        """Decode the first section for an app id, or None if absent."""
        frame = self.index.get(app_id)
        if frame is None:
            return None
        return decode_section(self._raw, frame.offset, strict=self.strict)[0]

    def get_sections(self, app_id: int) -> list[Section]:
        return [decode_section(self._raw, frame.offset, strict=self.strict)[0] for frame in self.index.get_all(app_id)]

    @property
    def app_ids(self) -> list[int]:
        return self.index.app_ids

    def to_document(self) -> Document:
        """Convert to a full Document (decodes every section)."""
        return decode_document(self._raw, strict=self.strict)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> AppInfoReaderHandle:
        return self

    def __exit__(self, *args) -> None:
        self.close()
