"""The feegrant module: fee allowances granted and revoked."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from chainindexer.bech32 import validate_address

logger = logging.getLogger(__name__)

MODULE_NAME = "feegrant"
ACCOUNT_PREFIX = "cosmos"
EVENT_TYPE_REVOKE_FEE_GRANT = "revoke_feegrant"
ATTRIBUTE_KEY_GRANTER = "granter"
ATTRIBUTE_KEY_GRANTEE = "grantee"
MSG_GRANT_ALLOWANCE = "/cosmos.feegrant.v1beta1.MsgGrantAllowance"
MSG_REVOKE_ALLOWANCE = "/cosmos.feegrant.v1beta1.MsgRevokeAllowance"


@dataclass(frozen=True)
class Event:
    """A block event: its type and its key/value attributes in order."""

    type: str
    attributes: Sequence[tuple[str, str]] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(tuple(pair) for pair in self.attributes))

    def attribute(self, key: str) -> str:
        """The value of the first attribute with the given key."""
        for name, value in self.attributes:
            if name == key:
                return value
        raise KeyError(f"no attribute with key {key} found inside event with type {self.type}")


@dataclass(frozen=True)
class FeeGrant:
    granter: str
    grantee: str
    allowance: Mapping[str, Any]
    height: int


@dataclass(frozen=True)
class GrantRemoval:
    grantee: str
    granter: str
    height: int


def _call(message: str, call: Callable[..., Any], *args: Any) -> Any:
    try:
        return call(*args)
    except Exception as exc:
        raise RuntimeError(f"{message}: {exc}") from exc


class FeegrantModule:
    """Keeps the stored fee allowances in step with the chain."""

    account_prefix = ACCOUNT_PREFIX

    def __init__(self, db: Any) -> None:
        self.db = db

    def name(self) -> str:
        return MODULE_NAME

    def handle_block(self, height: int, end_block_events: Iterable[Event]) -> None:
        """Remove the allowances that expired in this block, logging failures."""
        try:
            self.remove_expired_allowances(height, end_block_events)
        except Exception as exc:
            logger.error("error when removing expired fee grant allowance: %s", exc)

    def remove_expired_allowances(self, height: int, events: Iterable[Event]) -> None:
        logger.debug("updating expired fee grant allowances at height %d", height)
        for event in events:
            if event.type != EVENT_TYPE_REVOKE_FEE_GRANT:
                continue
            granter = _call(
                "error while getting fee grant granter address", event.attribute, ATTRIBUTE_KEY_GRANTER
            )
            grantee = _call(
                "error while getting fee grant grantee address", event.attribute, ATTRIBUTE_KEY_GRANTEE
            )
            _call(
                "error while deleting fee grant allowance",
                self.db.delete_fee_grant_allowance,
                GrantRemoval(grantee, granter, height),
            )

    def handle_msg(self, msg: Mapping[str, Any], tx: Any) -> None:
        """Handle a decoded message by its ``@type``; failed txs are skipped."""
        if not tx.logs:
            return
        msg_type = msg.get("@type")
        if msg_type == MSG_GRANT_ALLOWANCE:
            self.handle_grant_allowance(tx, msg)
        elif msg_type == MSG_REVOKE_ALLOWANCE:
            self.handle_revoke_allowance(tx, msg)

    def handle_grant_allowance(self, tx: Any, msg: Mapping[str, Any]) -> None:
        allowance = msg.get("allowance")
        if not isinstance(allowance, Mapping):
            raise RuntimeError("error while getting fee allowance: allowance is missing")
        granter = _call(
            "error while parsing granter address",
            validate_address,
            msg.get("granter", ""),
            self.account_prefix,
        )
        grantee = _call(
            "error while parsing grantee address",
            validate_address,
            msg.get("grantee", ""),
            self.account_prefix,
        )
        self.db.save_fee_grant_allowance(FeeGrant(granter, grantee, dict(allowance), tx.height))

    def handle_revoke_allowance(self, tx: Any, msg: Mapping[str, Any]) -> None:
        self.db.delete_fee_grant_allowance(
            GrantRemoval(msg.get("grantee", ""), msg.get("granter", ""), tx.height)
        )