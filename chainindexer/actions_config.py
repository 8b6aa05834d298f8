"""Configuration of the actions module."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import yaml

DEFAULT_PORT = 3000
_MAX_UINT = 2**64 - 1


@dataclass(frozen=True)
class NodeDetails:
    """Details of the remote node the actions query, kept as configured."""

    config: Mapping[str, Any]


@dataclass(frozen=True)
class ActionsConfig:
    """Port the actions server listens on and the node it reads from."""

    port: int
    node: Optional[NodeDetails] = None

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"invalid actions port: {self.port!r}")
        if not 0 <= self.port <= _MAX_UINT:
            raise ValueError(f"invalid actions port: {self.port}")


def default_config() -> ActionsConfig:
    """The configuration used when none is given."""
    return ActionsConfig(port=DEFAULT_PORT, node=None)


def parse_config(data: Union[bytes, str]) -> Optional[ActionsConfig]:
    """Read the ``actions`` section of a YAML document.

    Returns None when the document has no such section.
    """
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid configuration: {exc}") from exc

    if document is None:
        return None
    if not isinstance(document, Mapping):
        raise ValueError("the configuration must be a mapping")

    section = document.get("actions")
    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise ValueError("the actions configuration must be a mapping")

    port = section.get("port")
    if port is None:
        port = 0

    node_section = section.get("node")
    if node_section is None:
        node = None
    elif isinstance(node_section, Mapping):
        node = NodeDetails(dict(node_section))
    else:
        raise ValueError("the actions node configuration must be a mapping")

    return ActionsConfig(port=port, node=node)