from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from appinfo.converters import node_from_dict
from appinfo.document import Container, IntValue, StringValue
from appinfo.spec import U32_MAX

ASSASSINS_CREED_2_APP_ID = 33362


def steam_edit_node() -> Container:
    return Container(b"steam_edit", (
        IntValue(b"is_hidden", 1),
        StringValue(b"base_name", b"Assassin's Creed 2 - Mac"),
        StringValue(b"base_type", b"DLC"),
    ))


@dataclass(frozen=True)
class PatchConfig:
    app_id: int = ASSASSINS_CREED_2_APP_ID
    container: bytes = b"appinfo"
    node: Container = field(default_factory=steam_edit_node)
    keep_only_target: bool = True


DEFAULT_PATCH = PatchConfig()


def load_patch_config(config_path: Optional[Union[str, Path]] = None) -> PatchConfig:
    if config_path is None:
        return DEFAULT_PATCH
    path = Path(config_path)
    with path.open('r', encoding='utf-8') as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid patch config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Patch config {path} must be a JSON object")

    app_id = payload.get('app_id', DEFAULT_PATCH.app_id)
    if not isinstance(app_id, int) or isinstance(app_id, bool):
        raise ValueError(f"app_id must be an integer, got {app_id!r}")
    if not 0 <= app_id <= U32_MAX:
        raise ValueError(f"app_id out of range: {app_id}")
    container = payload.get('container')
    if container is None:
        container = DEFAULT_PATCH.container
    elif isinstance(container, str):
        container = container.encode('utf-8')
    else:
        raise ValueError(f"container must be a string, got {container!r}")
    node = node_from_dict(payload['node']) if 'node' in payload else DEFAULT_PATCH.node
    if not isinstance(node, Container):
        raise ValueError("Patch node must be a container")
    keep_only_target = payload.get('keep_only_target', DEFAULT_PATCH.keep_only_target)
    if not isinstance(keep_only_target, bool):
        raise ValueError(f"keep_only_target must be true or false, got {keep_only_target!r}")
    return PatchConfig(app_id=app_id, container=container, node=node, keep_only_target=keep_only_target)


__all__ = ['ASSASSINS_CREED_2_APP_ID', 'DEFAULT_PATCH', 'PatchConfig', 'load_patch_config', 'steam_edit_node']
