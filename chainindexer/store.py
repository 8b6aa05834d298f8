"""Storage of validator data in a SQL database."""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from chainindexer.bech32 import validate_address
from chainindexer.coins import format_dec, to_null_string, to_string
from chainindexer.staking import (
    DO_NOT_MODIFY,
    Description,
    DoubleSignEvidence,
    DoubleSignVote,
    ValidatorCommission,
    ValidatorDescription,
    ValidatorStatus,
    ValidatorVotingPower,
)
from chainindexer.validator_rows import ValidatorCommissionRow, ValidatorData

CONS_PREFIX = "cosmosvalcons"
OPERATOR_PREFIX = "cosmosvaloper"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS account (address TEXT NOT NULL PRIMARY KEY);
CREATE TABLE IF NOT EXISTS validator (
    consensus_address TEXT NOT NULL PRIMARY KEY,
    consensus_pubkey TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS validator_info (
    consensus_address TEXT NOT NULL UNIQUE REFERENCES validator (consensus_address),
    operator_address TEXT NOT NULL UNIQUE,
    self_delegate_address TEXT REFERENCES account (address),
    max_change_rate TEXT NOT NULL,
    max_rate TEXT NOT NULL,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_description (
    validator_address TEXT NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    moniker TEXT,
    identity TEXT,
    avatar_url TEXT,
    website TEXT,
    security_contact TEXT,
    details TEXT,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_commission (
    validator_address TEXT NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    commission TEXT NOT NULL,
    min_self_delegation TEXT NOT NULL,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_voting_power (
    validator_address TEXT NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    voting_power INTEGER NOT NULL,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS validator_status (
    validator_address TEXT NOT NULL PRIMARY KEY REFERENCES validator (consensus_address),
    status INTEGER NOT NULL,
    jailed BOOLEAN NOT NULL,
    tombstoned BOOLEAN NOT NULL DEFAULT FALSE,
    height INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS double_sign_vote (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type INTEGER NOT NULL,
    height INTEGER NOT NULL,
    round INTEGER NOT NULL,
    block_id TEXT NOT NULL,
    validator_address TEXT NOT NULL REFERENCES validator (consensus_address),
    validator_index INTEGER NOT NULL,
    signature TEXT NOT NULL,
    UNIQUE (block_id, validator_address)
);
CREATE TABLE IF NOT EXISTS double_sign_evidence (
    height INTEGER NOT NULL,
    vote_a_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    vote_b_id INTEGER NOT NULL REFERENCES double_sign_vote (id),
    UNIQUE (vote_a_id, vote_b_id)
);
CREATE TABLE IF NOT EXISTS modules (module_name TEXT NOT NULL PRIMARY KEY);
"""

_VALIDATOR_SELECT = """
SELECT validator.consensus_address, validator.consensus_pubkey,
       validator_info.operator_address, validator_info.max_change_rate,
       validator_info.max_rate, validator_info.self_delegate_address
FROM validator INNER JOIN validator_info
    ON validator.consensus_address = validator_info.consensus_address
"""


class StoreError(Exception):
    """Raised when the store cannot read or write what was asked."""


def _placeholders(count: int, width: int) -> str:
    row = "(" + ",".join("?" * width) + ")"
    return ",".join([row] * count)


class ValidatorStore:
    """Reads and writes validator data through a DB-API connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection

    def _execute(self, what: str, stmt: str, params: Iterable = ()) -> sqlite3.Cursor:
        try:
            with self._conn:
                return self._conn.execute(stmt, tuple(params))
        except sqlite3.Error as exc:
            raise StoreError(f"error while {what}: {exc}") from exc

    def _query(self, stmt: str, params: Iterable = ()) -> list[tuple]:
        try:
            return self._conn.execute(stmt, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    def create_schema(self) -> None:
        """Create the tables used by the store, if missing."""
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"error while creating schema: {exc}") from exc

    # ---------------------------------------------------------------- validators

    def save_validator_data(self, validator: ValidatorData) -> None:
        self.save_validators_data([validator])

    def save_validators_data(self, validators: Iterable[ValidatorData]) -> None:
        """Store the given validators, their accounts and their info."""
        validators = list(validators)
        if not validators:
            return
        count = len(validators)

        self._execute(
            "storing accounts",
            f"INSERT INTO account (address) VALUES {_placeholders(count, 1)} "
            "ON CONFLICT DO NOTHING",
            [v.self_delegate_address for v in validators],
        )
        self._execute(
            "storing validators",
            "INSERT INTO validator (consensus_address, consensus_pubkey) VALUES "
            f"{_placeholders(count, 2)} ON CONFLICT DO NOTHING",
            [p for v in validators for p in (v.consensus_address, v.consensus_pubkey)],
        )
        info_params = [
            p
            for v in validators
            for p in (
                v.consensus_address,
                v.operator_address,
                v.self_delegate_address,
                format_dec(v.max_change_rate()),
                format_dec(v.max_rate()),
                v.height,
            )
        ]
        self._execute(
            "storing validator infos",
            "INSERT INTO validator_info (consensus_address, operator_address, "
            "self_delegate_address, max_change_rate, max_rate, height) VALUES "
            f"{_placeholders(count, 6)} "
            """ON CONFLICT (consensus_address) DO UPDATE
    SET consensus_address = excluded.consensus_address,
        operator_address = excluded.operator_address,
        self_delegate_address = excluded.self_delegate_address,
        max_change_rate = excluded.max_change_rate,
        max_rate = excluded.max_rate,
        height = excluded.height
WHERE validator_info.height <= excluded.height""",
            info_params,
        )

    def get_validator_consensus_address(self, address: str) -> str:
        """The consensus address of the validator with this operator address."""
        rows = self._query(
            "SELECT consensus_address FROM validator_info WHERE operator_address = ?",
            [address],
        )
        if not rows:
            raise StoreError(
                "cannot find the consensus address of validator having "
                f"operator address {address}"
            )
        return validate_address(rows[0][0], CONS_PREFIX)

    def get_validator_operator_address(self, cons_addr: str) -> str:
        """The operator address of the validator with this consensus address."""
        rows = self._query(
            "SELECT operator_address FROM validator_info WHERE consensus_address = ?",
            [cons_addr],
        )
        if not rows:
            raise StoreError(
                "cannot find the operator address of validator having "
                f"consensus address {cons_addr}"
            )
        return validate_address(rows[0][0], OPERATOR_PREFIX)

    @staticmethod
    def _to_data(row: tuple) -> ValidatorData:
        cons, pubkey, operator, max_change_rate, max_rate, self_delegate = row
        return ValidatorData(
            consensus_address=cons,
            operator_address=operator,
            consensus_pubkey=pubkey,
            self_delegate_address=self_delegate,
            max_rate_text=max_rate,
            max_change_rate_text=max_change_rate,
            height=0,
        )

    def get_validator(self, val_address: str) -> ValidatorData:
        rows = self._query(
            _VALIDATOR_SELECT + "WHERE validator_info.operator_address = ?", [val_address]
        )
        if not rows:
            raise StoreError(f"no validator with validator address {val_address} could be found")
        return self._to_data(rows[0])

    def get_validators(self) -> list[ValidatorData]:
        """All stored validators, ordered by consensus address."""
        rows = self._query(
            """SELECT validator.consensus_address, validator.consensus_pubkey,
       validator_info.operator_address, validator_info.self_delegate_address,
       validator_info.max_rate, validator_info.max_change_rate, validator_info.height
FROM validator INNER JOIN validator_info
    ON validator.consensus_address = validator_info.consensus_address
GROUP BY validator.consensus_address
ORDER BY validator.consensus_address"""
        )
        return [
            ValidatorData(
                consensus_address=cons,
                operator_address=operator,
                consensus_pubkey=pubkey,
                self_delegate_address=self_delegate,
                max_rate_text=max_rate,
                max_change_rate_text=max_change_rate,
                height=height,
            )
            for cons, pubkey, operator, self_delegate, max_rate, max_change_rate, height in rows
        ]

    def get_validator_by_self_delegate_address(self, address: str) -> ValidatorData:
        rows = self._query(
            _VALIDATOR_SELECT + "WHERE validator_info.self_delegate_address = ?", [address]
        )
        if not rows:
            raise StoreError(f"no validator with self delegate address {address} could be found")
        return self._to_data(rows[0])

    # --------------------------------------------------------------- description

    def _get_validator_description(self, cons_addr: str) -> Optional[ValidatorDescription]:
        try:
            rows = self._conn.execute(
                "SELECT validator_address, moniker, identity, avatar_url, website, "
                "security_contact, details, height FROM validator_description "
                "WHERE validator_address = ?",
                (cons_addr,),
            ).fetchall()
        except sqlite3.Error:
            return None
        if not rows:
            return None
        address, moniker, identity, avatar, website, security, details, height = rows[0]
        return ValidatorDescription(
            operator_address=address,
            description=Description(
                to_string(moniker),
                to_string(identity),
                to_string(website),
                to_string(security),
                to_string(details),
            ),
            avatar_url=to_string(avatar),
            height=height,
        )

    def save_validator_description(self, description: ValidatorDescription) -> None:
        """Store a description, merging it with the existing one if any."""
        cons_addr = self.get_validator_consensus_address(description.operator_address)
        des = description.description.ensure_length()

        avatar_url = description.avatar_url
        existing = self._get_validator_description(cons_addr)
        if existing is not None:
            des = existing.description.update_description(des)
            if description.avatar_url == DO_NOT_MODIFY:
                avatar_url = existing.avatar_url

        self._execute(
            "storing validator description",
            """INSERT INTO validator_description (
    validator_address, moniker, identity, avatar_url, website, security_contact, details, height
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET moniker = excluded.moniker,
        identity = excluded.identity,
        avatar_url = excluded.avatar_url,
        website = excluded.website,
        security_contact = excluded.security_contact,
        details = excluded.details,
        height = excluded.height
WHERE validator_description.height <= excluded.height""",
            [
                to_null_string(cons_addr),
                to_null_string(des.moniker),
                to_null_string(des.identity),
                to_null_string(avatar_url),
                to_null_string(des.website),
                to_null_string(des.security_contact),
                to_null_string(des.details),
                description.height,
            ],
        )

    # ---------------------------------------------------------------- commission

    def _get_validator_commission(self, cons_addr: str) -> Optional[ValidatorCommissionRow]:
        try:
            rows = self._conn.execute(
                "SELECT validator_address, commission, min_self_delegation, height "
                "FROM validator_commission WHERE validator_address = ?",
                (cons_addr,),
            ).fetchall()
        except sqlite3.Error:
            return None
        return ValidatorCommissionRow(*rows[0]) if rows else None

    def save_validator_commission(self, data: ValidatorCommission) -> None:
        """Store the commission, keeping the existing value of missing fields."""
        if data.commission is None and data.min_self_delegation is None:
            return
        cons_addr = self.get_validator_consensus_address(data.val_address)

        commission = min_self_delegation = ""
        existing = self._get_validator_commission(cons_addr)
        if existing is not None:
            commission = existing.commission or ""
            min_self_delegation = existing.min_self_delegation or ""

        if data.commission is not None:
            commission = format_dec(data.commission)
        if data.min_self_delegation is not None:
            min_self_delegation = str(data.min_self_delegation)

        self._execute(
            "storing validator commission",
            """INSERT INTO validator_commission (validator_address, commission, min_self_delegation, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET commission = excluded.commission,
        min_self_delegation = excluded.min_self_delegation,
        height = excluded.height
WHERE validator_commission.height <= excluded.height""",
            [cons_addr, commission, min_self_delegation, data.height],
        )

    # ------------------------------------------------------ voting power, status

    def save_validators_voting_powers(self, entries: Iterable[ValidatorVotingPower]) -> None:
        entries = list(entries)
        if not entries:
            return
        self._execute(
            "storing validators voting power",
            "INSERT INTO validator_voting_power (validator_address, voting_power, height) "
            f"VALUES {_placeholders(len(entries), 3)} "
            """ON CONFLICT (validator_address) DO UPDATE
    SET voting_power = excluded.voting_power,
        height = excluded.height
WHERE validator_voting_power.height <= excluded.height""",
            [p for e in entries for p in (e.consensus_address, e.voting_power, e.height)],
        )

    def save_validators_statuses(self, statuses: Iterable[ValidatorStatus]) -> None:
        statuses = list(statuses)
        if not statuses:
            return
        count = len(statuses)
        self._execute(
            "storing validators",
            "INSERT INTO validator (consensus_address, consensus_pubkey) VALUES "
            f"{_placeholders(count, 2)} ON CONFLICT DO NOTHING",
            [p for s in statuses for p in (s.consensus_address, s.consensus_pubkey)],
        )
        self._execute(
            "storing validators statuses",
            "INSERT INTO validator_status (validator_address, status, jailed, tombstoned, height) "
            f"VALUES {_placeholders(count, 5)} "
            """ON CONFLICT (validator_address) DO UPDATE
    SET status = excluded.status,
        jailed = excluded.jailed,
        tombstoned = excluded.tombstoned,
        height = excluded.height
WHERE validator_status.height <= excluded.height""",
            [
                p
                for s in statuses
                for p in (s.consensus_address, s.status, s.jailed, s.tombstoned, s.height)
            ],
        )

    # ----------------------------------------------------------------- evidence

    def _save_double_sign_vote(self, vote: DoubleSignVote) -> int:
        cursor = self._execute(
            "storing double sign vote",
            "INSERT INTO double_sign_vote (type, height, round, block_id, "
            "validator_address, validator_index, signature) "
            "VALUES (?, ?, ?, ?, ?, ?, ?) ON CONFLICT DO NOTHING",
            [
                vote.type,
                vote.height,
                vote.round,
                vote.block_id,
                vote.validator_address,
                vote.validator_index,
                vote.signature,
            ],
        )
        if cursor.rowcount == 0:
            raise StoreError("error while storing double sign vote: no rows in result set")
        return cursor.lastrowid

    def save_double_sign_evidence(self, evidence: DoubleSignEvidence) -> None:
        vote_a = self._save_double_sign_vote(evidence.vote_a)
        vote_b = self._save_double_sign_vote(evidence.vote_b)
        self._execute(
            "storing double sign evidence",
            "INSERT INTO double_sign_evidence (height, vote_a_id, vote_b_id) "
            "VALUES (?, ?, ?) ON CONFLICT DO NOTHING",
            [evidence.height, vote_a, vote_b],
        )

    # ------------------------------------------------------------------ modules

    def insert_enabled_modules(self, modules: Iterable[str]) -> None:
        """Replace the stored list of enabled modules."""
        modules = list(modules)
        if not modules:
            return
        self._execute("deleting modules", "DELETE FROM modules WHERE TRUE")
        self._execute(
            "storing modules",
            f"INSERT INTO modules (module_name) VALUES {_placeholders(len(modules), 1)} "
            "ON CONFLICT DO NOTHING",
            modules,
        )