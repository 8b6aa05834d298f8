"""The bank module: the total supply of the chain's tokens."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from chainindexer.periodic import PeriodicScheduler, watch_method

logger = logging.getLogger(__name__)

MODULE_NAME = "bank"


class BankModule:
    """Keeps the stored total supply up to date."""

    def __init__(self, source: Any, db: Any) -> None:
        self.source = source
        self.db = db

    def name(self) -> str:
        return MODULE_NAME

    def update_supply(self) -> None:
        """Read the supply at the last stored block and save it."""
        logger.debug("updating total supply")
        try:
            block = self.db.get_last_block()
        except Exception as exc:
            raise RuntimeError(f"error while getting last block: {exc}") from exc
        supply = self.source.get_supply(block.height)
        self.db.save_supply(supply, block.height)

    def register_periodic_operations(self, scheduler: PeriodicScheduler) -> None:
        logger.debug("setting up periodic tasks")
        try:
            scheduler.every(timedelta(minutes=10), lambda: watch_method(self.update_supply))
        except ValueError as exc:
            raise RuntimeError(f"error while setting up bank periodic operation: {exc}") from exc