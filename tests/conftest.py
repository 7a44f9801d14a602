"""
Shared fixtures. Wire bytes are assembled by hand with struct so reader tests
do not depend on the writer.
"""

import struct

import pytest

from appinfo.document import Container, Document, Header, IntValue, Section, StringValue
from appinfo.spec import MAGIC


class Wire:

    @staticmethod
    def cstr(value: bytes) -> bytes:
        return value + b"\x00"

    @staticmethod
    def container(name: bytes, *children: bytes) -> bytes:
        return b"\x00" + Wire.cstr(name) + b"".join(children) + b"\x08"

    @staticmethod
    def string(name: bytes, value: bytes) -> bytes:
        return b"\x01" + Wire.cstr(name) + Wire.cstr(value)

    @staticmethod
    def integer(name: bytes, value: int) -> bytes:
        return b"\x02" + Wire.cstr(name) + struct.pack("<I", value)

    @staticmethod
    def node_list(*nodes: bytes) -> bytes:
        return b"".join(nodes) + b"\x08"

    @staticmethod
    def body(nodes: bytes, info_state=0, last_updated=0, pics_token=0,
             sha1=bytes(20), binary_sha1=bytes(20), change_number=0) -> bytes:
        fixed = struct.pack("<IIQ20s20sI", info_state, last_updated, pics_token, sha1, binary_sha1, change_number)
        return fixed + nodes

    @staticmethod
    def section(app_id: int, nodes: bytes, **fields) -> bytes:
        body = Wire.body(nodes, **fields)
        return struct.pack("<II", app_id, len(body)) + body

    @staticmethod
    def header(version: int = 1, magic: int = MAGIC) -> bytes:
        return struct.pack("<II", magic, version)

    @staticmethod
    def document(*sections: bytes, version: int = 1) -> bytes:
        return Wire.header(version) + b"".join(sections) + b"\x00\x00\x00\x00"


@pytest.fixture
def wire():
    return Wire


@pytest.fixture
def minimal_bytes():
    """Header (MAGIC, 1), one all-zero section for app 1 with no nodes."""
    return Wire.document(Wire.section(1, Wire.node_list()))


@pytest.fixture
def sample_bytes():
    w = Wire
    first = w.section(
        1,
        w.node_list(
            w.container(b"appinfo",
                        w.integer(b"appid", 1),
                        w.container(b"common",
                                    w.string(b"name", b"Foo"),
                                    w.string(b"type", b"Game"))),
        ),
        info_state=2,
        last_updated=1600000000,
        pics_token=0x1122334455667788,
        sha1=bytes(range(20)),
        binary_sha1=bytes(range(20, 40)),
        change_number=7,
    )
    second = w.section(
        33362,
        w.node_list(
            w.container(b"appinfo",
                        w.container(b"common", w.string(b"name", b"Assassin's Creed 2")),
                        w.container(b"appinfo")),
            w.string(b"extra", b"x"),
        ),
        sha1=b"\xaa" * 20,
        binary_sha1=b"\xbb" * 20,
        change_number=99,
    )
    return w.document(first, second, version=41)


@pytest.fixture
def sample_document():
    """The in-memory equivalent of sample_bytes."""
    first = Section(
        app_id=1,
        info_state=2,
        last_updated=1600000000,
        pics_token=0x1122334455667788,
        sha1=bytes(range(20)),
        binary_sha1=bytes(range(20, 40)),
        change_number=7,
        nodes=(
            Container(b"appinfo", (
                IntValue(b"appid", 1),
                Container(b"common", (
                    StringValue(b"name", b"Foo"),
                    StringValue(b"type", b"Game"),
                )),
            )),
        ),
    )
    second = Section(
        app_id=33362,
        sha1=b"\xaa" * 20,
        binary_sha1=b"\xbb" * 20,
        change_number=99,
        nodes=(
            Container(b"appinfo", (
                Container(b"common", (StringValue(b"name", b"Assassin's Creed 2"),)),
                Container(b"appinfo"),
            )),
            StringValue(b"extra", b"x"),
        ),
    )
    return Document(header=Header(MAGIC, 41), sections=(first, second))


@pytest.fixture
def appinfo_file(tmp_path, sample_bytes):
    path = tmp_path / "appinfo.vdf"
    path.write_bytes(sample_bytes)
    return path
