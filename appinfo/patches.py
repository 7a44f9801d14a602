"""
App-scoped patches built on the editor primitives.

The shipped patch hides Assassin's Creed 2 from the library by adding a
"steam_edit" block to its "appinfo" container. Target and template are data
(see appinfo.config.PatchConfig), not code.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from appinfo.document import Container, Document, Node
from appinfo.editor import NodeTransform, filter_sections, rewrite_sections

if TYPE_CHECKING:
    from appinfo.config import PatchConfig

logger = logging.getLogger(__name__)


def append_child(container_name: bytes, child: Node) -> NodeTransform:
    """
    Transform that appends child to a top-level Container named container_name.

    The match is shallow: nested containers with the same name are left alone.
    Every other node is returned unchanged.
    """

    def transform(node: Node) -> Node:
        if isinstance(node, Container) and node.name == container_name:
            return Container(node.name, node.children + (child,))
        return node

    return transform


def patch_app(
    document: Document,
    app_id: int,
    transform: NodeTransform,
    *,
    keep_only_target: bool = True,
) -> Document:
    """
    Rewrite every section of app_id with transform.

    With keep_only_target (the default) all other sections are dropped from
    the result; otherwise they pass through unchanged.
    """
    if keep_only_target:
        document = filter_sections(document, lambda i: i == app_id)
    patched = rewrite_sections(document, lambda i: i == app_id, transform)
    matched = len(patched.get_sections(app_id))
    if not matched:
        logger.warning("App %d not found, nothing patched", app_id)
    else:
        logger.info("Patched %d section(s) for app %d", matched, app_id)
    return patched


def fix_document(document: Document, config: PatchConfig | None = None) -> Document:
    """Apply a PatchConfig (DEFAULT_PATCH when omitted)."""
    if config is None:
        from appinfo.config import DEFAULT_PATCH
        config = DEFAULT_PATCH
    transform = append_child(config.container, config.node)
    return patch_app(document, config.app_id, transform, keep_only_target=config.keep_only_target)
