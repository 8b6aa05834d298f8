"""The consensus module: genesis data and average block times."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from chainindexer.periodic import PeriodicScheduler, watch_method

logger = logging.getLogger(__name__)

MODULE_NAME = "consensus"


@dataclass(frozen=True)
class Genesis:
    """The chain id, start time and initial height of the chain."""

    chain_id: str
    time: datetime
    initial_height: int


@dataclass(frozen=True)
class BlockInfo:
    """The height and time of a stored block."""

    height: int
    timestamp: datetime


def _average(elapsed: timedelta, blocks: int) -> float:
    seconds = elapsed.total_seconds()
    if blocks == 0:
        return math.nan if seconds == 0 else math.copysign(math.inf, seconds)
    return seconds / blocks


def _call(message: str, call: Callable[..., Any], *args: Any) -> Any:
    try:
        return call(*args)
    except Exception as exc:
        raise RuntimeError(f"{message}: {exc}") from exc


class ConsensusModule:
    """Stores the genesis and keeps the average block times up to date."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def name(self) -> str:
        return MODULE_NAME

    def handle_genesis(self, chain_id: str, genesis_time: datetime, initial_height: int) -> None:
        logger.debug("parsing genesis")
        _call(
            "error while storing genesis time",
            self.db.save_genesis,
            Genesis(chain_id, genesis_time, initial_height),
        )

    def handle_block(self, height: int, block_time: datetime) -> None:
        """Update the average block time since genesis, logging any failure."""
        try:
            self.update_block_time_from_genesis(height, block_time)
        except Exception as exc:
            logger.error(
                "error while updating block time from genesis at height %d: %s", height, exc
            )

    def update_block_time_from_genesis(self, height: int, block_time: datetime) -> None:
        logger.debug("updating block time from genesis at height %d", height)
        genesis = _call("error while getting genesis", self.db.get_genesis)
        if genesis is None:
            raise RuntimeError("genesis table is empty")
        average = _average(block_time - genesis.time, height - genesis.initial_height)
        self.db.save_average_block_time_genesis(average, height)

    def _update_block_time(
        self,
        minimum_age: timedelta,
        lookup: Callable[[datetime], BlockInfo],
        lookup_message: str,
        save: Callable[[float, int], None],
    ) -> None:
        block = _call("error while getting last block", self.db.get_last_block)
        genesis = _call("error while getting genesis", self.db.get_genesis)
        if genesis is None:
            return
        if block.timestamp - genesis.time < minimum_age:
            return
        previous = _call(lookup_message, lookup, block.timestamp)
        average = _average(block.timestamp - previous.timestamp, block.height - previous.height)
        save(average, block.height)

    def update_block_time_in_minute(self) -> None:
        logger.debug("updating block time in minutes")
        self._update_block_time(
            timedelta(0),
            self.db.get_block_height_time_minute_ago,
            "error while gettting block height a minute ago",
            self.db.save_average_block_time_per_min,
        )

    def update_block_time_in_hour(self) -> None:
        logger.debug("updating block time in hours")
        self._update_block_time(
            timedelta(0),
            self.db.get_block_height_time_hour_ago,
            "error while getting block height an hour ago",
            self.db.save_average_block_time_per_hour,
        )

    def update_block_time_in_day(self) -> None:
        logger.debug("updating block time in days")
        self._update_block_time(
            timedelta(hours=24),
            self.db.get_block_height_time_day_ago,
            "error while getting block time a day ago",
            self.db.save_average_block_time_per_day,
        )

    def register_periodic_operations(self, scheduler: PeriodicScheduler) -> None:
        logger.debug("setting up periodic tasks")
        jobs = (
            (timedelta(minutes=1), self.update_block_time_in_minute),
            (timedelta(hours=1), self.update_block_time_in_hour),
            (timedelta(days=1), self.update_block_time_in_day),
        )
        for interval, method in jobs:
            try:
                scheduler.every(interval, lambda method=method: watch_method(method))
            except ValueError as exc:
                raise RuntimeError(
                    f"error while setting up consensus periodic operation: {exc}"
                ) from exc