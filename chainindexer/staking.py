"""Staking values handed to the validator store."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

DO_NOT_MODIFY = "[do-not-modify]"

MAX_MONIKER_LENGTH = 70
MAX_IDENTITY_LENGTH = 3000
MAX_WEBSITE_LENGTH = 140
MAX_SECURITY_CONTACT_LENGTH = 140
MAX_DETAILS_LENGTH = 280

_LIMITS = (
    ("moniker", MAX_MONIKER_LENGTH),
    ("identity", MAX_IDENTITY_LENGTH),
    ("website", MAX_WEBSITE_LENGTH),
    ("security_contact", MAX_SECURITY_CONTACT_LENGTH),
    ("details", MAX_DETAILS_LENGTH),
)


@dataclass(frozen=True)
class Description:
    """The public description of a validator."""

    moniker: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""

    def ensure_length(self) -> "Description":
        """Return the description, raising ValueError if a field is too long."""
        for name, limit in _LIMITS:
            value = getattr(self, name)
            if len(value) > limit:
                raise ValueError(
                    f"invalid {name} length; got: {len(value)}, max: {limit}"
                )
        return self

    def update_description(self, other: "Description") -> "Description":
        """Apply other on top of this one, keeping fields marked do-not-modify."""
        changes = {
            name: getattr(other, name)
            for name, _ in _LIMITS
            if getattr(other, name) != DO_NOT_MODIFY
        }
        return replace(self, **changes).ensure_length()


@dataclass(frozen=True)
class ValidatorDescription:
    operator_address: str
    description: Description
    avatar_url: str
    height: int


@dataclass(frozen=True)
class ValidatorCommission:
    val_address: str
    commission: Optional[Decimal]
    min_self_delegation: Optional[int]
    height: int


@dataclass(frozen=True)
class ValidatorVotingPower:
    consensus_address: str
    voting_power: int
    height: int


@dataclass(frozen=True)
class ValidatorStatus:
    consensus_address: str
    consensus_pubkey: str
    status: int
    jailed: bool
    tombstoned: bool
    height: int


@dataclass(frozen=True)
class DoubleSignVote:
    type: int
    height: int
    round: int
    block_id: str
    validator_address: str
    validator_index: int
    signature: str


@dataclass(frozen=True)
class DoubleSignEvidence:
    height: int
    vote_a: DoubleSignVote
    vote_b: DoubleSignVote