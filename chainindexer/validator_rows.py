"""Rows of the validator tables."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from chainindexer.coins import to_null_string


def _int_rate(text: str) -> Decimal:
    try:
        return Decimal(int(text, 10))
    except ValueError as exc:
        raise ValueError(f"invalid rate value: {text!r}") from exc


@dataclass(frozen=True)
class ValidatorData:
    """All the stored data of a single validator."""

    consensus_address: str
    operator_address: str
    consensus_pubkey: str
    self_delegate_address: str
    max_rate_text: str
    max_change_rate_text: str
    height: int

    def max_rate(self) -> Decimal:
        """The maximum commission rate, read as an integer."""
        return _int_rate(self.max_rate_text)

    def max_change_rate(self) -> Decimal:
        """The maximum commission change rate, read as an integer."""
        return _int_rate(self.max_change_rate_text)


@dataclass(frozen=True)
class ValidatorRow:
    consensus_address: str
    consensus_pubkey: str


@dataclass(frozen=True)
class ValidatorInfoRow:
    consensus_address: str
    operator_address: str
    self_delegate_address: str
    max_rate: str
    max_change_rate: str
    height: int


@dataclass(frozen=True)
class ValidatorDescriptionRow:
    validator_address: str
    moniker: Optional[str]
    identity: Optional[str]
    avatar_url: Optional[str]
    website: Optional[str]
    security_contact: Optional[str]
    details: Optional[str]
    height: int

    def equals(self, other: "ValidatorDescriptionRow") -> bool:
        """Compare the rows, leaving the avatar URL aside."""
        return (
            self.validator_address == other.validator_address
            and self.moniker == other.moniker
            and self.identity == other.identity
            and self.website == other.website
            and self.security_contact == other.security_contact
            and self.details == other.details
            and self.height == other.height
        )


def new_validator_description_row(
    val_address: str,
    moniker: str,
    identity: str,
    avatar_url: str,
    website: str,
    security_contact: str,
    details: str,
    height: int,
) -> ValidatorDescriptionRow:
    """Build a description row, turning blank texts into nulls."""
    return ValidatorDescriptionRow(
        validator_address=val_address,
        moniker=to_null_string(moniker),
        identity=to_null_string(identity),
        avatar_url=to_null_string(avatar_url),
        website=to_null_string(website),
        security_contact=to_null_string(security_contact),
        details=to_null_string(details),
        height=height,
    )


@dataclass(frozen=True)
class ValidatorCommissionRow:
    validator_address: str
    commission: Optional[str]
    min_self_delegation: Optional[str]
    height: int


def new_validator_commission_row(
    operator_address: str, commission: str, min_self_delegation: str, height: int
) -> ValidatorCommissionRow:
    """Build a commission row, turning blank texts into nulls."""
    return ValidatorCommissionRow(
        validator_address=operator_address,
        commission=to_null_string(commission),
        min_self_delegation=to_null_string(min_self_delegation),
        height=height,
    )


@dataclass(frozen=True)
class ValidatorVotingPowerRow:
    validator_address: str
    voting_power: int
    height: int


@dataclass(frozen=True)
class ValidatorStatusRow:
    status: int
    jailed: bool
    tombstoned: bool
    validator_address: str
    height: int


@dataclass(frozen=True)
class DoubleSignVoteRow:
    id: int
    vote_type: int
    height: int
    round: int
    block_id: str
    validator_address: str
    validator_index: int
    signature: str


@dataclass(frozen=True)
class DoubleSignEvidenceRow:
    height: int
    vote_a_id: int
    vote_b_id: int