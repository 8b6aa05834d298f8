import json
from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from chainindexer.coins import DecCoin
from chainindexer.distribution import (
    MSG_FUND_COMMUNITY_POOL,
    DistributionModule,
    DistributionParams,
)
from chainindexer.periodic import PeriodicScheduler

POOL = [DecCoin("uatom", Decimal("12.5"))]
PARAMS = {"community_tax": "0.020000000000000000", "withdraw_addr_enabled": True}


class FakeSource:
    def __init__(self, fail=False):
        self.fail = fail

    def community_pool(self, height):
        if self.fail:
            raise ConnectionError("node offline")
        return POOL

    def params(self, height):
        if self.fail:
            raise ConnectionError("node offline")
        return PARAMS


class FakeDb:
    def __init__(self, last_height=42):
        self.last_height = last_height
        self.pools = []
        self.params = []

    def save_community_pool(self, pool, height):
        self.pools.append((pool, height))

    def save_distribution_params(self, params):
        self.params.append(params)

    def get_last_block_height(self):
        return self.last_height


def test_name():
    assert DistributionModule(FakeSource(), FakeDb()).name() == "distribution"


def test_handle_genesis_saves_params():
    db = FakeDb()
    state = {"distribution": json.dumps({"params": PARAMS})}
    DistributionModule(FakeSource(), db).handle_genesis(7, state)
    assert db.params == [DistributionParams(PARAMS, 7)]


def test_handle_genesis_without_state_fails():
    with pytest.raises(RuntimeError, match="error while reading distribution genesis data"):
        DistributionModule(FakeSource(), FakeDb()).handle_genesis(1, {})


def test_handle_msg_without_logs_does_nothing():
    db = FakeDb()
    tx = SimpleNamespace(logs=[], height=10)
    DistributionModule(FakeSource(), db).handle_msg(MSG_FUND_COMMUNITY_POOL, tx)
    assert db.pools == []


def test_handle_msg_fund_updates_pool():
    db = FakeDb()
    tx = SimpleNamespace(logs=["ok"], height=10)
    DistributionModule(FakeSource(), db).handle_msg(MSG_FUND_COMMUNITY_POOL, tx)
    assert db.pools == [(POOL, 10)]


def test_handle_msg_other_type_ignored():
    db = FakeDb()
    tx = SimpleNamespace(logs=["ok"], height=10)
    DistributionModule(FakeSource(), db).handle_msg("/cosmos.bank.v1beta1.MsgSend", tx)
    assert db.pools == []


def test_update_community_pool_wraps_source_error():
    with pytest.raises(RuntimeError, match="error while getting comminity pool"):
        DistributionModule(FakeSource(fail=True), FakeDb()).update_community_pool(3)


def test_update_latest_community_pool_uses_last_height():
    db = FakeDb(last_height=99)
    DistributionModule(FakeSource(), db).update_latest_community_pool()
    assert db.pools == [(POOL, 99)]


def test_update_params():
    db = FakeDb()
    DistributionModule(FakeSource(), db).update_params(5)
    assert db.params == [DistributionParams(PARAMS, 5)]


def test_update_params_wraps_error():
    with pytest.raises(RuntimeError, match="error while getting params"):
        DistributionModule(FakeSource(fail=True), FakeDb()).update_params(5)


def test_register_periodic_operations():
    db = FakeDb(last_height=8)
    scheduler = PeriodicScheduler()
    DistributionModule(FakeSource(), db).register_periodic_operations(scheduler)
    assert [interval for interval, _ in scheduler.jobs] == [timedelta(hours=1).total_seconds()]
    scheduler.run_pending(0)
    assert db.pools == [(POOL, 8)]