"""
Text dump of a Document.

Output mirrors the platform's own debug dump: header fields, then per section
its scalar fields and a brace-delimited node block, two spaces per level.
"""

from __future__ import annotations

from appinfo.document import Container, Document, Node, Section, StringValue


def _quote(value: bytes) -> str:
    text = value.decode("utf-8", "backslashreplace")
    return '"' + text.replace('"', '\\"') + '"'


def _leaf(node: Node) -> str:
    if isinstance(node, StringValue):
        return f"{_quote(node.name)}: {_quote(node.value)}"
    return f"{_quote(node.name)}: {node.value}"


def render_nodes(nodes: tuple[Node, ...]) -> str:
    """Brace block for a node list, walked with an explicit stack."""
    out = ["{\n"]
    # [children, next index, indent level]
    stack: list[list] = [[nodes, 0, 1]]
    while stack:
        frame = stack[-1]
        children, index, level = frame
        if index == len(children):
            stack.pop()
            out.append("  " * (level - 1) + "}")
            if stack:
                parent = stack[-1]
                out.append(",\n" if parent[1] < len(parent[0]) else "\n")
            continue
        frame[1] += 1
        node = children[index]
        indent = "  " * level
        if isinstance(node, Container):
            out.append(f"{indent}{_quote(node.name)}: {{\n")
            stack.append([node.children, 0, level + 1])
        else:
            sep = "," if frame[1] < len(children) else ""
            out.append(f"{indent}{_leaf(node)}{sep}\n")
    return "".join(out)


def render_section(section: Section) -> str:
    data_size = section.data_size
    if data_size is None:
        from appinfo.writer import encode_section_body
        data_size = len(encode_section_body(section))
    lines = [
        "# VDFAppSection",
        f"app_id: {section.app_id}",
        f"data_size: {data_size}",
        f"info_state: {section.info_state}",
        f"last_updated: {section.last_updated}",
        f"pics_token: {section.pics_token}",
        f"sha1: {section.sha1.hex()}",
        f"binary_sha1: {section.binary_sha1.hex()}",
        f"change_number: {section.change_number}",
    ]
    return "\n".join(lines) + "\n" + render_nodes(section.nodes)


def render(document: Document) -> str:
    parts = [
        "# VDFHeader\n",
        f"magic: {document.header.magic}\n",
        f"version: {document.header.version}\n\n",
    ]
    for section in document.sections:
        parts.append(render_section(section))
        parts.append("\n\n")
    return "".join(parts)
