"""
Unit Tests - Test individual components in isolation.
"""

import pytest

from appinfo.spec import MAGIC, NODE_CONTAINER, NODE_END, NODE_INT, NODE_STRING, SECTION_FIXED, SECTIONS_END
from appinfo.document import Container, Document, Header, IntValue, Section, StringValue
from appinfo.errors import AppInfoError, BadMagic, Truncated, UnterminatedString


# =============================================================================
# Nodes
# =============================================================================

class TestNodes:

    def test_container_defaults(self):
        c = Container(b"appinfo")
        assert c.name == b"appinfo"
        assert c.children == ()
        assert c.tag == NODE_CONTAINER

    def test_children_list_becomes_tuple(self):
        c = Container(b"a", [IntValue(b"x", 1)])
        assert c.children == (IntValue(b"x", 1),)

    def test_tags(self):
        assert StringValue(b"a", b"b").tag == NODE_STRING
        assert IntValue(b"a", 0).tag == NODE_INT

    def test_nodes_are_frozen(self):
        node = IntValue(b"a", 1)
        with pytest.raises(AttributeError):
            node.value = 2

    def test_empty_strings_allowed(self):
        node = StringValue(b"", b"")
        assert node.name == b""

    def test_rejects_text_name(self):
        with pytest.raises(ValueError, match="must be bytes"):
            StringValue("name", b"value")

    def test_rejects_null_in_name(self):
        with pytest.raises(ValueError, match="null byte"):
            Container(b"ap\x00pinfo")

    def test_rejects_null_in_value(self):
        with pytest.raises(ValueError, match="null byte"):
            StringValue(b"name", b"a\x00b")

    @pytest.mark.parametrize("value", [-1, 2 ** 32, True, "1"])
    def test_rejects_out_of_range_int(self, value):
        with pytest.raises(ValueError, match="out of range"):
            IntValue(b"n", value)

    def test_accepts_u32_max(self):
        assert IntValue(b"n", 0xFFFFFFFF).value == 0xFFFFFFFF

    def test_container_get(self):
        c = Container(b"common", (StringValue(b"name", b"Foo"), IntValue(b"name", 3)))
        assert c.get(b"name") == StringValue(b"name", b"Foo")
        assert c.get(b"missing") is None

    def test_walk_is_depth_first(self):
        tree = Container(b"root", (
            Container(b"a", (IntValue(b"a1", 1),)),
            StringValue(b"b", b"v"),
        ))
        assert [n.name for n in tree.walk()] == [b"a", b"a1", b"b"]

    def test_walk_deep_tree(self):
        node = IntValue(b"leaf", 1)
        for _ in range(5000):
            node = Container(b"c", (node,))
        names = [n.name for n in node.walk()]
        assert len(names) == 5000
        assert names[-1] == b"leaf"

    def test_walk_continues_past_none_child(self):
        tree = Container(b"root", (None, IntValue(b"after", 1)))
        assert list(tree.walk()) == [None, IntValue(b"after", 1)]


# =============================================================================
# Section / Document
# =============================================================================

class TestSection:

    def test_defaults(self):
        s = Section(app_id=10)
        assert s.sha1 == bytes(20)
        assert s.binary_sha1 == bytes(20)
        assert s.nodes == ()
        assert s.data_size is None

    def test_rejects_short_digest(self):
        with pytest.raises(ValueError, match="sha1 must be 20 bytes"):
            Section(app_id=1, sha1=b"\x00" * 19)

    def test_rejects_wide_fields(self):
        with pytest.raises(ValueError, match="app_id"):
            Section(app_id=2 ** 32)
        with pytest.raises(ValueError, match="pics_token"):
            Section(app_id=1, pics_token=2 ** 64)

    def test_data_size_not_compared(self):
        assert Section(app_id=1, data_size=61) == Section(app_id=1)

    def test_get_top_level(self):
        s = Section(app_id=1, nodes=(Container(b"appinfo"),))
        assert s.get(b"appinfo") == Container(b"appinfo")
        assert s.get(b"common") is None


class TestDocument:

    def test_defaults(self):
        doc = Document()
        assert doc.header == Header(MAGIC, 0)
        assert doc.sections == ()

    def test_get_section(self, sample_document):
        assert sample_document.get_section(33362).change_number == 99
        assert sample_document.get_section(404) is None

    def test_get_sections_duplicates(self):
        doc = Document(sections=[Section(app_id=5, change_number=1), Section(app_id=5, change_number=2)])
        assert [s.change_number for s in doc.get_sections(5)] == [1, 2]
        assert doc.get_section(5).change_number == 1

    def test_app_ids(self, sample_document):
        assert sample_document.app_ids == [1, 33362]

    def test_repr(self, sample_document):
        r = repr(sample_document)
        assert "Document" in r
        assert "33362" in r

    def test_to_bytes(self, sample_document, sample_bytes):
        assert sample_document.to_bytes() == sample_bytes


# =============================================================================
# Spec constants / errors
# =============================================================================

class TestSpec:

    def test_magic(self):
        assert MAGIC == 0x07564427

    def test_sentinels(self):
        assert NODE_END == 8
        assert SECTIONS_END == b"\x00\x00\x00\x00"

    def test_fixed_field_size(self):
        # info_state + last_updated + pics_token + two digests + change_number
        assert SECTION_FIXED.size == 4 + 4 + 8 + 20 + 20 + 4


class TestErrors:

    def test_errors_are_value_errors(self):
        assert issubclass(AppInfoError, ValueError)
        assert issubclass(BadMagic, AppInfoError)

    def test_offset_in_message(self):
        err = Truncated("section length", 4, 2, offset=17)
        assert err.offset == 17
        assert "offset 17" in str(err)
        assert "need 4 bytes, have 2" in str(err)

    def test_bad_magic_value(self):
        err = BadMagic(0xDEADBEEF)
        assert err.value == 0xDEADBEEF
        assert "0xdeadbeef" in str(err)

    def test_unterminated(self):
        assert "Unterminated" in str(UnterminatedString(3))
