"""
Dict / JSON views of appinfo documents.

Names and values are bytes in the model. Here they become str via UTF-8 with
surrogateescape, so undecodable bytes survive a trip through JSON.
"""

from __future__ import annotations

import json
from typing import Any

from appinfo.document import Container, Document, IntValue, Node, Section, StringValue
from appinfo.spec import NODE_KINDS


def _text(value: bytes) -> str:
    return value.decode("utf-8", "surrogateescape")


def _bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected text, got {type(value).__name__}")
    return value.encode("utf-8", "surrogateescape")


def _shallow_dict(node: Node) -> dict[str, Any]:
    out: dict[str, Any] = {"type": NODE_KINDS[node.tag], "name": _text(node.name)}
    if isinstance(node, Container):
        out["children"] = []
    elif isinstance(node, StringValue):
        out["value"] = _text(node.value)
    else:
        out["value"] = node.value
    return out


def node_to_dict(node: Node) -> dict[str, Any]:
    """Dict view of a node tree, built with an explicit stack."""
    root = _shallow_dict(node)
    stack = [(node, root)]
    while stack:
        current, out = stack.pop()
        if isinstance(current, Container):
            for child in current.children:
                child_out = _shallow_dict(child)
                out["children"].append(child_out)
                stack.append((child, child_out))
    return root


def _node_header(data: Any) -> tuple[Any, bytes]:
    if not isinstance(data, dict):
        raise ValueError(f"Node must be an object, got {type(data).__name__}")
    if "name" not in data:
        raise ValueError(f"Node is missing 'name': {data}")
    return data.get("type"), _bytes(data["name"])


def _children(data: dict[str, Any]) -> list[Any]:
    children = data.get("children", [])
    if not isinstance(children, list):
        raise ValueError(f"Container children must be a list, got {type(children).__name__}")
    return children


def _leaf_from_dict(data: dict[str, Any], kind: Any, name: bytes) -> Node:
    if "value" not in data:
        raise ValueError(f"Node is missing 'value': {data}")
    if kind == "string":
        return StringValue(name, _bytes(data["value"]))
    if kind == "int":
        return IntValue(name, data["value"])
    raise ValueError(f"Unknown node type: {kind!r}")


def node_from_dict(data: dict[str, Any]) -> Node:
    """
    Build a node from {"type": ..., "name": ..., "value"/"children": ...}.

    Containers are assembled bottom-up from an explicit stack of
    [name, child dicts, next index, built children] frames.
    Raises ValueError on unknown types or missing keys.
    """
    kind, name = _node_header(data)
    if kind != "container":
        return _leaf_from_dict(data, kind, name)

    frames: list[list] = [[name, _children(data), 0, []]]
    while True:
        frame = frames[-1]
        name, pending, index, built = frame
        if index == len(pending):
            frames.pop()
            node = Container(name, tuple(built))
            if not frames:
                return node
            frames[-1][3].append(node)
            continue
        frame[2] += 1
        child = pending[index]
        child_kind, child_name = _node_header(child)
        if child_kind == "container":
            frames.append([child_name, _children(child), 0, []])
        else:
            built.append(_leaf_from_dict(child, child_kind, child_name))


def section_to_dict(section: Section) -> dict[str, Any]:
    return {
        "app_id": section.app_id,
        "data_size": section.data_size,
        "info_state": section.info_state,
        "last_updated": section.last_updated,
        "pics_token": section.pics_token,
        "sha1": section.sha1.hex(),
        "binary_sha1": section.binary_sha1.hex(),
        "change_number": section.change_number,
        "nodes": [node_to_dict(n) for n in section.nodes],
    }


def document_to_dict(document: Document) -> dict[str, Any]:
    return {
        "magic": document.header.magic,
        "version": document.header.version,
        "sections": [section_to_dict(s) for s in document.sections],
    }


def to_json(document: Document, indent: int | None = 2) -> str:
    """JSON text for a document. Raises ValueError when nesting exceeds the json encoder's depth."""
    try:
        return json.dumps(document_to_dict(document), indent=indent)
    except RecursionError as exc:
        raise ValueError("Document nests too deeply for JSON output") from exc
