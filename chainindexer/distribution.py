"""The distribution module: parameters and the community pool."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from chainindexer.periodic import PeriodicScheduler, watch_method

logger = logging.getLogger(__name__)

MODULE_NAME = "distribution"
MSG_FUND_COMMUNITY_POOL = "/cosmos.distribution.v1beta1.MsgFundCommunityPool"


@dataclass(frozen=True)
class DistributionParams:
    """The distribution parameters valid from the given height."""

    params: Any
    height: int


def _call(message: str, call: Callable[..., Any], *args: Any) -> Any:
    try:
        return call(*args)
    except Exception as exc:
        raise RuntimeError(f"{message}: {exc}") from exc


def _module_state(app_state: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = app_state.get(name)
    if raw is None:
        raise ValueError(f"no {name} state in the genesis")
    state = raw if isinstance(raw, Mapping) else json.loads(raw)
    if not isinstance(state, Mapping):
        raise ValueError(f"the {name} genesis state must be a JSON object")
    return state


class DistributionModule:
    """Stores the distribution parameters and the community pool."""

    def __init__(self, source: Any, db: Any) -> None:
        self.source = source
        self.db = db

    def name(self) -> str:
        return MODULE_NAME

    def handle_genesis(self, initial_height: int, app_state: Mapping[str, Any]) -> None:
        logger.debug("parsing genesis")
        state = _call(
            "error while reading distribution genesis data", _module_state, app_state, MODULE_NAME
        )
        _call(
            "error while storing genesis distribution params",
            self.db.save_distribution_params,
            DistributionParams(state.get("params") or {}, initial_height),
        )

    def handle_msg(self, msg_type: str, tx: Any) -> None:
        """Refresh the community pool after a successful fund message."""
        if not tx.logs:
            return
        if msg_type == MSG_FUND_COMMUNITY_POOL:
            self.update_community_pool(tx.height)

    def update_community_pool(self, height: int) -> None:
        logger.debug("getting community pool at height %d", height)
        pool = _call("error while getting comminity pool", self.source.community_pool, height)
        self.db.save_community_pool(pool, height)

    def update_latest_community_pool(self) -> None:
        height = _call("error while getting latest block height", self.db.get_last_block_height)
        self.update_community_pool(height)

    def update_params(self, height: int) -> None:
        logger.debug("updating params at height %d", height)
        params = _call("error while getting params", self.source.params, height)
        self.db.save_distribution_params(DistributionParams(params, height))

    def register_periodic_operations(self, scheduler: PeriodicScheduler) -> None:
        logger.debug("setting up periodic tasks")
        try:
            scheduler.every(
                timedelta(hours=1), lambda: watch_method(self.update_latest_community_pool)
            )
        except ValueError as exc:
            raise RuntimeError(
                f"error while scheduling distribution peridic operation: {exc}"
            ) from exc