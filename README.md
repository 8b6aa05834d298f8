# chainindexer

`chainindexer` keeps an indexed copy of a Cosmos-style chain's validator data
in a SQL database. It also provides the record types for the chain's other
tables, the textual database form of coins, and modules that react to genesis
data, blocks, messages and periodic jobs.

## What it contains

- `chainindexer.store`: `ValidatorStore` stores validators, descriptions,
  commissions, voting powers, statuses, double-sign evidence and the list of
  enabled modules through a `sqlite3` connection. A stored row is replaced only
  by data at an equal or greater height. A failed operation raises
  `StoreError`.
- `chainindexer.validator_rows`: records for the validator tables, such as
  `ValidatorData`, `ValidatorInfoRow`, `ValidatorDescriptionRow`,
  `ValidatorCommissionRow`, `ValidatorStatusRow`, `DoubleSignVoteRow` and
  `DoubleSignEvidenceRow`.
- `chainindexer.rows`: records for the other tables, such as blocks, genesis,
  proposals, votes, deposits, supply, community pool, inflation, token prices,
  signing info and enabled modules (`module_rows`).
- `chainindexer.staking`: the values handed to the store: `Description` (with
  `ensure_length` and `update_description`), `ValidatorDescription`,
  `ValidatorCommission`, `ValidatorVotingPower`, `ValidatorStatus`,
  `DoubleSignVote` and `DoubleSignEvidence`.
- `chainindexer.coins`: `Coin` and `DecCoin`, their database forms `DbCoin`
  and `DbDecCoin`, `format_dec` (18 fractional digits), and parsers for
  `(denom,amount)` and `{"(a,1)","(b,2)"}`.
- `chainindexer.bech32`: `decode` and `validate_address` for bech32 addresses.
- `chainindexer.batching`: `split_accounts` splits a list into batches that keep
  one statement within the 65535-parameter limit.
- `chainindexer.actions_config`: `parse_config` reads the `actions` section of a
  YAML document into an `ActionsConfig` (port and optional `NodeDetails`), and
  `default_config` gives port 3000.
- `chainindexer.payload`: `Payload` and `PayloadArgs` for action requests
  (`Payload.from_dict`, `address()`, `pagination()`), and `ActionContext`,
  whose `get_height` falls back to the node's latest height when the payload's
  height is 0.
- `chainindexer.responses`: action response records (`Balance`, `Delegation`,
  `Redelegation`, `GraphQLError` and others), `convert_coins`,
  `convert_dec_coins`, and `to_json_data`, which turns them into plain JSON data.
- `chainindexer.periodic`: `PeriodicScheduler` (`every`, `run_pending`) and
  `watch_method`, which logs a failing job and does not raise.
- Chain modules: `AuthModule` (`chainindexer.auth`), `BankModule`
  (`chainindexer.bank`), `ConsensusModule` (`chainindexer.consensus`),
  `DistributionModule` (`chainindexer.distribution`) and `FeegrantModule`
  (`chainindexer.feegrant`).

## Storing validators

```python
import sqlite3

from chainindexer.store import ValidatorStore, StoreError

store = ValidatorStore(sqlite3.connect(":memory:"))
store.create_schema()

store.insert_enabled_modules(["auth", "bank", "staking"])

try:
    store.get_validator("cosmosvaloper1unknown")
except StoreError as exc:
    print(exc)
```

You save validators with `save_validator_data`, or in bulk with
`save_validators_data`. You read them back with `get_validator`,
`get_validators` and `get_validator_by_self_delegate_address`.
`get_validator_consensus_address` and `get_validator_operator_address` check
that the address they return is valid bech32.

## Coins in their database form

```python
from chainindexer.coins import parse_db_coins, DbCoin

coins = parse_db_coins(b'{"(uatom,100)","(stake,5)"}')
single = DbCoin.parse(b"(uatom,100)")
print(single.value())   # (uatom,100)
```

## Actions configuration

```python
from chainindexer.actions_config import parse_config, default_config

config = parse_config(b"actions:\n  port: 3000\n")
print(config.port)               # 3000
print(default_config().port)     # 3000
```

`parse_config` returns `None` when the document has no `actions` section.

## Periodic jobs

```python
from chainindexer.periodic import PeriodicScheduler

scheduler = PeriodicScheduler()
scheduler.every(60, lambda: print("tick"))
scheduler.run_pending(now=0.0)    # runs the job
scheduler.run_pending(now=30.0)   # not due yet
```

The modules register their jobs with `register_periodic_operations(scheduler)`.
Each job is wrapped in `watch_method`.

## What the package does not do

- The chain modules take their database, and for bank and distribution a data
  source, as objects that you supply. `ValidatorStore` only covers the
  validator tables and the enabled modules. It has no storage for accounts,
  genesis, blocks, supply, community pool, distribution parameters or fee
  allowances, so you provide those methods (for example `save_accounts`,
  `get_genesis` and `save_supply`).
- There is no HTTP server for actions, no action handlers and no request
  metrics. `Payload`, `ActionContext` and the response records are provided,
  but the package does not route requests to them or serve them.
- The package does not connect to a chain node. Node queries for balances,
  delegations and rewards are not included.

## Running the tests

Install the `test` extra and run `pytest` from the project root.