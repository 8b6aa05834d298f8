from datetime import datetime, timedelta, timezone

import pytest

from chainindexer.consensus import BlockInfo, ConsensusModule, Genesis
from chainindexer.periodic import PeriodicScheduler

START = datetime(2021, 1, 1, tzinfo=timezone.utc)
STEP = 6.0


class FakeDb:
    def __init__(self, genesis=None, last_block=None, ago=None, fail_genesis_save=False):
        self.genesis = genesis
        self.last_block = last_block
        self.ago = ago or {}
        self.saved = {}
        self.fail_genesis_save = fail_genesis_save

    def save_genesis(self, genesis):
        if self.fail_genesis_save:
            raise OSError("disk full")
        self.genesis = genesis

    def get_genesis(self):
        return self.genesis

    def get_last_block(self):
        if self.last_block is None:
            raise LookupError("no blocks")
        return self.last_block

    def get_block_height_time_minute_ago(self, timestamp):
        return self.ago["minute"]

    def get_block_height_time_hour_ago(self, timestamp):
        return self.ago["hour"]

    def get_block_height_time_day_ago(self, timestamp):
        return self.ago["day"]

    def save_average_block_time_genesis(self, value, height):
        self.saved["genesis"] = (value, height)

    def save_average_block_time_per_min(self, value, height):
        self.saved["minute"] = (value, height)

    def save_average_block_time_per_hour(self, value, height):
        self.saved["hour"] = (value, height)

    def save_average_block_time_per_day(self, value, height):
        self.saved["day"] = (value, height)


def test_name():
    assert ConsensusModule(FakeDb()).name() == "consensus"


def test_handle_genesis_stores_genesis():
    db = FakeDb()
    ConsensusModule(db).handle_genesis("test-chain", START, 1)
    assert db.genesis == Genesis("test-chain", START, 1)


def test_handle_genesis_wraps_errors():
    module = ConsensusModule(FakeDb(fail_genesis_save=True))
    with pytest.raises(RuntimeError, match="error while storing genesis time"):
        module.handle_genesis("test-chain", START, 1)


def test_block_time_from_genesis():
    db = FakeDb(genesis=Genesis("test-chain", START, 1))
    blocks = 10
    ConsensusModule(db).update_block_time_from_genesis(
        1 + blocks, START + timedelta(seconds=STEP * blocks)
    )
    assert db.saved["genesis"] == (STEP, 1 + blocks)


def test_block_time_from_genesis_needs_genesis():
    with pytest.raises(RuntimeError, match="genesis table is empty"):
        ConsensusModule(FakeDb()).update_block_time_from_genesis(5, START)


def test_handle_block_logs_errors():
    db = FakeDb()
    ConsensusModule(db).handle_block(5, START)
    assert db.saved == {}


def _chain(age, blocks):
    now = START + age
    last = BlockInfo(1000, now)
    earlier = BlockInfo(1000 - blocks, now - timedelta(seconds=STEP * blocks))
    return FakeDb(
        genesis=Genesis("test-chain", START, 1),
        last_block=last,
        ago={"minute": earlier, "hour": earlier, "day": earlier},
    )


def test_block_time_in_minute():
    db = _chain(timedelta(minutes=5), 10)
    ConsensusModule(db).update_block_time_in_minute()
    assert db.saved["minute"] == (STEP, db.last_block.height)


def test_block_time_in_hour():
    db = _chain(timedelta(hours=2), 20)
    ConsensusModule(db).update_block_time_in_hour()
    assert db.saved["hour"] == (STEP, db.last_block.height)


def test_block_time_in_day():
    db = _chain(timedelta(days=2), 30)
    ConsensusModule(db).update_block_time_in_day()
    assert db.saved["day"] == (STEP, db.last_block.height)


def test_block_time_in_day_skipped_for_young_chain():
    db = _chain(timedelta(hours=23), 30)
    ConsensusModule(db).update_block_time_in_day()
    assert db.saved == {}


def test_block_time_skipped_without_genesis():
    db = _chain(timedelta(hours=2), 10)
    db.genesis = None
    ConsensusModule(db).update_block_time_in_minute()
    assert db.saved == {}


def test_last_block_error_is_wrapped():
    db = FakeDb(genesis=Genesis("test-chain", START, 1))
    with pytest.raises(RuntimeError, match="error while getting last block"):
        ConsensusModule(db).update_block_time_in_hour()


def test_register_periodic_operations():
    db = _chain(timedelta(days=2), 10)
    scheduler = PeriodicScheduler()
    ConsensusModule(db).register_periodic_operations(scheduler)
    intervals = [interval for interval, _ in scheduler.jobs]
    assert intervals == [
        timedelta(minutes=1).total_seconds(),
        timedelta(hours=1).total_seconds(),
        timedelta(days=1).total_seconds(),
    ]
    scheduler.run_pending(0)
    assert set(db.saved) == {"minute", "hour", "day"}