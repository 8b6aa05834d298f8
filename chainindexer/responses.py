"""Responses returned by action handlers and their JSON form."""

from __future__ import annotations

import base64
import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from chainindexer.coins import Coin, DecCoin, format_dec

# Field metadata understood by to_json_data.
AS_STRING = {"json_string": True}
OMIT_EMPTY = {"omitempty": True}


@dataclass(frozen=True)
class ResponseCoin:
    amount: str
    denom: str


def convert_coins(coins: Iterable[Coin]) -> list[ResponseCoin]:
    return [ResponseCoin(amount=str(coin.amount), denom=coin.denom) for coin in coins]


def convert_dec_coins(coins: Iterable[DecCoin]) -> list[ResponseCoin]:
    return [
        ResponseCoin(amount=format_dec(coin.amount), denom=coin.denom) for coin in coins
    ]


@dataclass(frozen=True)
class Address:
    address: str


@dataclass(frozen=True)
class Balance:
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class Delegation:
    delegator_address: str
    validator_address: str
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class DelegationResponse:
    delegations: list[Delegation]
    pagination: Optional[Any]


@dataclass(frozen=True)
class DelegationReward:
    coins: list[ResponseCoin]
    validator_address: str


@dataclass(frozen=True)
class ValidatorCommissionAmount:
    coins: list[ResponseCoin]


@dataclass(frozen=True)
class UnbondingDelegation:
    delegator_address: str
    validator_address: str
    entries: list[Any]


@dataclass(frozen=True)
class UnbondingDelegationResponse:
    unbonding_delegations: list[UnbondingDelegation]
    pagination: Optional[Any]


@dataclass(frozen=True)
class RedelegationEntry:
    completion_time: datetime
    balance: int = field(metadata=AS_STRING)


@dataclass(frozen=True)
class Redelegation:
    delegator_address: str
    validator_src_address: str
    validator_dst_address: str
    entries: list[RedelegationEntry]


@dataclass(frozen=True)
class RedelegationResponse:
    redelegations: list[Redelegation]
    pagination: Optional[Any]


@dataclass(frozen=True)
class GraphQLError:
    message: str


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value == 0 or value in ("", b"") or (
        isinstance(value, (list, tuple, Mapping)) and len(value) == 0
    )


def to_json_data(value: Any) -> Any:
    """Turn a response into plain JSON data.

    Dataclass fields become object keys by name; decimals carry 18 fractional
    digits, times are RFC 3339 (naive ones taken as UTC) and bytes base64.
    """
    if value is None or isinstance(value, (bool, str, int, float)):
        return value
    if isinstance(value, Decimal):
        return format_dec(value)
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = {}
        for item in dataclasses.fields(value):
            content = getattr(value, item.name)
            if item.metadata.get("omitempty") and _is_empty(content):
                continue
            if item.metadata.get("json_string") and content is not None:
                result[item.name] = str(content)
            else:
                result[item.name] = to_json_data(content)
        return result
    if isinstance(value, Mapping):
        return {str(key): to_json_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_data(item) for item in value]
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")