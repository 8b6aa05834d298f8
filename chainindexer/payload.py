"""Payloads of action requests and the context handlers run in."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_UINT64_MAX = 2**64 - 1


def _check_int(name: str, value: Any, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid {name}: {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{name} out of range: {value}")


@dataclass(frozen=True)
class PageRequest:
    """Pagination asked of a node query."""

    offset: int = 0
    limit: int = 0
    count_total: bool = False


@dataclass(frozen=True)
class PayloadArgs:
    """The input arguments of an action."""

    address: str = ""
    height: int = 0
    offset: int = 0
    limit: int = 0
    count_total: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.address, str):
            raise ValueError(f"invalid address: {self.address!r}")
        _check_int("height", self.height, _INT64_MIN, _INT64_MAX)
        _check_int("offset", self.offset, 0, _UINT64_MAX)
        _check_int("limit", self.limit, 0, _UINT64_MAX)
        if not isinstance(self.count_total, bool):
            raise ValueError(f"invalid count_total: {self.count_total!r}")


@dataclass(frozen=True)
class Payload:
    """The request body sent for an action."""

    session_variables: Mapping[str, Any] = field(default_factory=dict)
    input: PayloadArgs = field(default_factory=PayloadArgs)

    @classmethod
    def from_dict(cls, data: Any) -> "Payload":
        """Build a payload from decoded JSON; null fields keep their defaults."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError("the payload must be a JSON object")

        session = data.get("session_variables")
        if session is None:
            session = {}
        elif not isinstance(session, Mapping):
            raise ValueError("session_variables must be a JSON object")

        raw_input = data.get("input")
        if raw_input is None:
            raw_input = {}
        elif not isinstance(raw_input, Mapping):
            raise ValueError("input must be a JSON object")

        defaults = PayloadArgs()
        values = {
            name: raw_input.get(name)
            if raw_input.get(name) is not None
            else getattr(defaults, name)
            for name in ("address", "height", "offset", "limit", "count_total")
        }
        return cls(session_variables=dict(session), input=PayloadArgs(**values))

    def address(self) -> str:
        """The address the action is about, or an empty string."""
        return self.input.address

    def pagination(self) -> PageRequest:
        """The pagination requested by the action."""
        return PageRequest(
            offset=self.input.offset,
            limit=self.input.limit,
            count_total=self.input.count_total,
        )


class _Node(Protocol):
    def latest_height(self) -> int: ...


@dataclass
class ActionContext:
    """What an action handler needs: the node and the data sources."""

    node: _Node
    sources: Any

    def get_height(self, payload: Optional[Payload]) -> int:
        """The payload's height, or the node's latest when none is given."""
        if payload is None or payload.input.height == 0:
            try:
                return self.node.latest_height()
            except Exception as exc:
                raise RuntimeError(
                    f"error while getting chain latest block height: {exc}"
                ) from exc
        return payload.input.height