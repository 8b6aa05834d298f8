from datetime import datetime, timedelta, timezone

import pytest

from chainindexer.bank import BankModule
from chainindexer.coins import Coin
from chainindexer.consensus import BlockInfo
from chainindexer.periodic import PeriodicScheduler

SUPPLY = [Coin("uatom", 1000), Coin("ustake", 50)]


class FakeSource:
    def __init__(self, fail=False):
        self.fail = fail
        self.heights = []

    def get_supply(self, height):
        if self.fail:
            raise ConnectionError("node offline")
        self.heights.append(height)
        return SUPPLY


class FakeDb:
    def __init__(self, block=None):
        self.block = block
        self.saved = []

    def get_last_block(self):
        if self.block is None:
            raise LookupError("no blocks")
        return self.block

    def save_supply(self, supply, height):
        self.saved.append((supply, height))


BLOCK = BlockInfo(77, datetime(2022, 5, 1, tzinfo=timezone.utc))


def test_name():
    assert BankModule(FakeSource(), FakeDb()).name() == "bank"


def test_update_supply_saves_at_last_height():
    source, db = FakeSource(), FakeDb(BLOCK)
    BankModule(source, db).update_supply()
    assert source.heights == [BLOCK.height]
    assert db.saved == [(SUPPLY, BLOCK.height)]


def test_update_supply_without_blocks_fails():
    with pytest.raises(RuntimeError, match="error while getting last block"):
        BankModule(FakeSource(), FakeDb()).update_supply()


def test_update_supply_source_error_propagates():
    with pytest.raises(ConnectionError):
        BankModule(FakeSource(fail=True), FakeDb(BLOCK)).update_supply()


def test_register_periodic_operations():
    db = FakeDb(BLOCK)
    scheduler = PeriodicScheduler()
    BankModule(FakeSource(), db).register_periodic_operations(scheduler)
    assert [interval for interval, _ in scheduler.jobs] == [timedelta(minutes=10).total_seconds()]
    scheduler.run_pending(0)
    assert db.saved == [(SUPPLY, BLOCK.height)]


def test_periodic_failure_does_not_raise():
    db = FakeDb(BLOCK)
    scheduler = PeriodicScheduler()
    BankModule(FakeSource(fail=True), db).register_periodic_operations(scheduler)
    scheduler.run_pending(0)
    assert db.saved == []