"""Rows of the chain data tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from chainindexer.coins import DbCoin, DbDecCoin


def _freeze(row: object, name: str) -> None:
    object.__setattr__(row, name, tuple(getattr(row, name)))


@dataclass(frozen=True)
class AccountRow:
    """A single row of the account table."""

    address: str


@dataclass(frozen=True)
class GenesisRow:
    """The single row of the genesis table."""

    chain_id: str
    time: datetime
    initial_height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class ConsensusRow:
    """The single row of the consensus table."""

    height: int
    round: int
    step: str
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class AverageTimeRow:
    """The average block time over a period."""

    average_time: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class BlockRow:
    """A single block stored in the database."""

    height: int
    hash: str
    num_txs: int
    total_gas: int
    proposer_address: Optional[str]
    pre_commits: int
    timestamp: datetime


@dataclass(frozen=True)
class DistributionParamsRow:
    params: str
    height: int
    one_row_id: bool = True


@dataclass(frozen=True)
class CommunityPoolRow:
    """The single row of the community_pool table."""

    coins: tuple[DbDecCoin, ...]
    height: int
    one_row_id: bool = field(default=True, compare=False)

    def __post_init__(self) -> None:
        _freeze(self, "coins")


@dataclass(frozen=True)
class FeeAllowanceRow:
    id: int
    grantee_address: str
    granter_address: str
    allowance: str
    height: int


@dataclass(frozen=True)
class GovParamsRow:
    deposit_params: str
    voting_params: str
    tally_params: str
    height: int
    one_row_id: bool = True


@dataclass(frozen=True)
class ProposalRow:
    """A single proposal; the raw content takes no part in comparisons."""

    proposal_id: int
    proposal_route: str
    proposal_type: str
    title: str
    description: str
    content: str = field(compare=False)
    submit_time: datetime
    deposit_end_time: datetime
    voting_start_time: datetime
    voting_end_time: datetime
    proposer_address: str
    status: str


@dataclass(frozen=True)
class TallyResultRow:
    proposal_id: int
    yes: str
    abstain: str
    no: str
    no_with_veto: str
    height: int


@dataclass(frozen=True)
class VoteRow:
    proposal_id: int
    voter_address: str
    option: str
    height: int


@dataclass(frozen=True)
class DepositRow:
    proposal_id: int
    depositor_address: str
    amount: tuple[DbCoin, ...]
    height: int

    def __post_init__(self) -> None:
        _freeze(self, "amount")


@dataclass(frozen=True)
class ProposalStakingPoolSnapshotRow:
    proposal_id: int
    bonded_tokens: int
    not_bonded_tokens: int
    height: int


@dataclass(frozen=True)
class ProposalValidatorVotingPowerSnapshotRow:
    id: int
    proposal_id: int
    validator_address: str
    voting_power: int
    status: int
    jailed: bool
    height: int


@dataclass(frozen=True)
class InflationRow:
    value: float
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class MintParamsRow:
    params: str
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class TokenUnitRow:
    token_name: str
    denom: str
    exponent: int
    aliases: tuple[str, ...]
    price_id: Optional[str]

    def __post_init__(self) -> None:
        _freeze(self, "aliases")


@dataclass(frozen=True)
class TokenRow:
    name: str
    traded_unit: str


@dataclass(frozen=True)
class TokenPriceRow:
    """A token price; the row id takes no part in comparisons."""

    unit_name: str
    price: float
    market_cap: int
    timestamp: datetime
    id: str = field(default="", compare=False)


@dataclass(frozen=True)
class ValidatorSigningInfoRow:
    validator_address: str
    start_height: int
    index_offset: int
    jailed_until: datetime
    tombstoned: bool
    missed_blocks_counter: int
    height: int


@dataclass(frozen=True)
class SlashingParamsRow:
    params: str
    height: int
    one_row_id: bool = True


@dataclass(frozen=True)
class StakingParamsRow:
    params: str
    height: int
    one_row_id: bool = True


@dataclass(frozen=True)
class StakingPoolRow:
    bonded_tokens: int
    not_bonded_tokens: int
    height: int
    one_row_id: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class SupplyRow:
    """The single row of the supply table."""

    coins: tuple[DbCoin, ...]
    height: int
    one_row_id: bool = field(default=True, compare=False)

    def __post_init__(self) -> None:
        _freeze(self, "coins")


@dataclass(frozen=True)
class ModuleRow:
    """A single enabled module."""

    module_name: str


def module_rows(names: Iterable[str]) -> list[ModuleRow]:
    """Build one module row per name, in order."""
    return [ModuleRow(name) for name in names]