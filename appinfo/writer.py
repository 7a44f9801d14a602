"""
appinfo Writer - Serializes Documents back to appinfo.vdf bytes.

Each section body is built in a scratch buffer first and then framed with its
measured length, so the length field is always exact no matter how the node
tree was edited. Digests are written back as they are.
"""

from __future__ import annotations

import logging
from pathlib import Path

from appinfo.document import Container, Document, Header, IntValue, Node, Section, StringValue
from appinfo.spec import HEADER, NODE_END, SECTION_FIXED, SECTION_FRAME, SECTIONS_END, U32

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


def encode_string(value: bytes) -> bytes:
    return value + b"\x00"


def encode_header(header: Header) -> bytes:
    return HEADER.pack(header.magic, header.version)


def encode_nodes(nodes: tuple[Node, ...] | list[Node]) -> bytes:
    """Encode a node list and every nested list, each closed by one end tag."""
    out = bytearray()
    stack = [iter(nodes)]
    while stack:
        node = next(stack[-1], _EXHAUSTED)
        if node is _EXHAUSTED:
            stack.pop()
            out.append(NODE_END)
            continue
        if not isinstance(node, (Container, StringValue, IntValue)):
            raise TypeError(f"Not a node: {node!r}")
        out.append(node.tag)
        out += encode_string(node.name)
        if isinstance(node, Container):
            stack.append(iter(node.children))
        elif isinstance(node, StringValue):
            out += encode_string(node.value)
        else:
            out += U32.pack(node.value)
    return bytes(out)


def encode_section_body(section: Section) -> bytes:
    fixed = SECTION_FIXED.pack(
        section.info_state,
        section.last_updated,
        section.pics_token,
        section.sha1,
        section.binary_sha1,
        section.change_number,
    )
    return fixed + encode_nodes(section.nodes)


def encode_section(section: Section) -> bytes:
    """app_id, measured body length, body."""
    body = encode_section_body(section)
    if section.data_size is not None and section.data_size != len(body):
        logger.debug("Section %d: body length %d -> %d", section.app_id, section.data_size, len(body))
    return SECTION_FRAME.pack(section.app_id, len(body)) + body


def encode_sections(sections: tuple[Section, ...] | list[Section]) -> bytes:
    """Encode all sections followed by the end-of-sections sentinel."""
    return b"".join(encode_section(s) for s in sections) + SECTIONS_END


def encode_document(document: Document) -> bytes:
    return encode_header(document.header) + encode_sections(document.sections)


class AppInfoWriter:
    """
    Writes appinfo documents.

    Usage:
        data = AppInfoWriter.serialize(doc)
        AppInfoWriter.write(doc, "appinfo.vdf")
    """

    @staticmethod
    def serialize(document: Document) -> bytes:
        return encode_document(document)

    @classmethod
    def write(cls, document: Document, path: str | Path) -> int:
        """Serialize and write to disk. Returns bytes written."""
        data = cls.serialize(document)
        path = Path(path)
        path.write_bytes(data)
        logger.debug("Wrote %d sections (%d bytes) to %s", len(document.sections), len(data), path)
        return len(data)
