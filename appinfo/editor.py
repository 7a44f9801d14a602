"""
Tree rewrite primitives.

These never mutate their input: every call returns new Document/Section
objects and shares untouched nodes with the original.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from appinfo.document import Document, Node, Section

NodeTransform = Callable[[Node], Node]
AppIdPredicate = Callable[[int], bool]


def filter_sections(document: Document, predicate: AppIdPredicate) -> Document:
    """Keep only sections whose app_id satisfies predicate, in their original order."""
    return replace(document, sections=tuple(s for s in document.sections if predicate(s.app_id)))


def rewrite_section_nodes(section: Section, transform: NodeTransform) -> Section:
    """
    Apply transform to each top-level node of a section.

    Non-recursive: descending into children is up to the transform.
    The decoded data_size no longer describes the new body, so it is cleared.
    """
    return replace(section, nodes=tuple(transform(node) for node in section.nodes), data_size=None)


def rewrite_sections(document: Document, predicate: AppIdPredicate, transform: NodeTransform) -> Document:
    """rewrite_section_nodes on every section whose app_id satisfies predicate."""
    sections = tuple(
        rewrite_section_nodes(s, transform) if predicate(s.app_id) else s
        for s in document.sections
    )
    return replace(document, sections=sections)
