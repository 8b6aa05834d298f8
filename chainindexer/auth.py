"""The auth module: accounts found in the genesis and in transactions."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

MODULE_NAME = "auth"

VESTING_ACCOUNT_TYPES = frozenset(
    {
        "/cosmos.vesting.v1beta1.ContinuousVestingAccount",
        "/cosmos.vesting.v1beta1.DelayedVestingAccount",
        "/cosmos.vesting.v1beta1.PeriodicVestingAccount",
        "/cosmos.vesting.v1beta1.PermanentLockedAccount",
    }
)


@dataclass(frozen=True)
class Account:
    address: str


def _auth_accounts(app_state: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    raw = app_state.get(MODULE_NAME)
    if raw is None:
        raise ValueError("no auth state in the genesis")
    state = raw if isinstance(raw, Mapping) else json.loads(raw)
    if not isinstance(state, Mapping):
        raise ValueError("the auth genesis state must be a JSON object")
    accounts = state.get("accounts") or []
    if not isinstance(accounts, list):
        raise ValueError("the genesis accounts must be a list")
    for account in accounts:
        if not isinstance(account, Mapping) or "@type" not in account:
            raise ValueError(f"invalid genesis account: {account!r}")
    return accounts


def _account_address(account: Mapping[str, Any]) -> str:
    node: Any = account
    while isinstance(node, Mapping):
        if "address" in node:
            return str(node["address"])
        node = node.get("base_vesting_account") or node.get("base_account")
    raise ValueError(f"account of type {account.get('@type')} has no address")


def get_genesis_accounts(app_state: Mapping[str, Any]) -> list[Account]:
    """The accounts listed in the auth section of the genesis state."""
    return [Account(_account_address(account)) for account in _auth_accounts(app_state)]


def get_genesis_vesting_accounts(app_state: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """The genesis accounts that are vesting accounts, as decoded."""
    return [
        account
        for account in _auth_accounts(app_state)
        if account["@type"] in VESTING_ACCOUNT_TYPES
    ]


def get_accounts(height: int, addresses: Iterable[str]) -> list[Account]:
    """The account data for the given addresses."""
    logger.debug("getting accounts data at height %d", height)
    return [Account(address) for address in addresses]


class AuthModule:
    """Stores the chain's accounts."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def name(self) -> str:
        return MODULE_NAME

    def handle_genesis(self, app_state: Mapping[str, Any]) -> None:
        logger.debug("parsing genesis")
        steps = (
            ("genesis accounts", get_genesis_accounts, self.db.save_accounts),
            ("genesis vesting accounts", get_genesis_vesting_accounts, self.db.save_vesting_accounts),
        )
        for what, read, save in steps:
            try:
                values = read(app_state)
            except Exception as exc:
                raise RuntimeError(f"error while getting {what}: {exc}") from exc
            try:
                save(values)
            except Exception as exc:
                raise RuntimeError(f"error while storing {what}: {exc}") from exc

    def refresh_accounts(self, height: int, addresses: Iterable[str]) -> None:
        """Store the account data of the given addresses."""
        self.db.save_accounts(get_accounts(height, addresses))