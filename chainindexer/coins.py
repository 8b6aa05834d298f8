"""Coin values and their textual form inside the database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Iterable, Optional, Union

DEC_PRECISION = 18
_QUANTUM = Decimal(1).scaleb(-DEC_PRECISION)
_DENOM_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")

DecLike = Union[Decimal, int, str]


def _validate_denom(denom: str) -> None:
    if not isinstance(denom, str) or not _DENOM_PATTERN.fullmatch(denom):
        raise ValueError(f"invalid denom: {denom!r}")


def _to_decimal(value: DecLike) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("a boolean is not a decimal amount")
    if isinstance(value, float):
        value = str(value)
    try:
        dec = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"invalid decimal: {value!r}") from exc
    if not dec.is_finite():
        raise ValueError(f"invalid decimal: {value!r}")
    return dec


def format_dec(value: DecLike) -> str:
    """Render a decimal with exactly 18 fractional digits."""
    dec = _to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = 200
        quantized = dec.quantize(_QUANTUM)
        if quantized != dec:
            raise ValueError(
                f"decimal {value!r} has more than {DEC_PRECISION} fractional digits"
            )
        if quantized == 0:
            quantized = abs(quantized)
        return format(quantized, "f")


def to_string(value: Optional[str]) -> str:
    """Return the string, or an empty string for a null value."""
    return value if value is not None else ""


def to_null_string(value: str) -> Optional[str]:
    """Trim the value; an empty result becomes null."""
    value = value.strip()
    return value if value else None


def remove_empty(values: Iterable[str]) -> list[str]:
    """Drop the empty strings from the given values."""
    return [value for value in values if value != ""]


@dataclass(frozen=True)
class Coin:
    """An integer amount of a denomination."""

    denom: str
    amount: int

    def __post_init__(self) -> None:
        _validate_denom(self.denom)
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"coin amount must be an integer, got {self.amount!r}")
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")


@dataclass(frozen=True)
class DecCoin:
    """A decimal amount of a denomination."""

    denom: str
    amount: Decimal

    def __post_init__(self) -> None:
        _validate_denom(self.denom)
        amount = _to_decimal(self.amount)
        if amount < 0:
            raise ValueError(f"negative coin amount: {amount}")
        object.__setattr__(self, "amount", amount)


def _decode(src: Union[bytes, bytearray, str]) -> str:
    if isinstance(src, (bytes, bytearray)):
        return bytes(src).decode()
    if isinstance(src, str):
        return src
    raise TypeError(f"cannot read a coin from {type(src).__name__}")


def _strip_single(src: Union[bytes, str]) -> list[str]:
    text = _decode(src)
    for char in ('"', "{", "}", "(", ")"):
        text = text.replace(char, "")
    values = text.split(",")
    if len(values) < 2:
        raise ValueError(f"invalid coin value: {text!r}")
    return values


def _split_many(src: Union[bytes, str]) -> list[tuple[str, str]]:
    text = _decode(src)
    for char in ('"', "{", "}"):
        text = text.replace(char, "")
    text = text.replace("),(", ") (")
    text = text.replace("(", "").replace(")", "")
    pairs = []
    for value in remove_empty(text.split(" ")):
        parts = value.split(",")
        if len(parts) < 2:
            raise ValueError(f"invalid coin value: {value!r}")
        pairs.append((parts[0], parts[1]))
    return pairs


@dataclass(frozen=True)
class DbCoin:
    """A coin as stored in the database: denom and amount as text."""

    denom: str
    amount: str

    @classmethod
    def from_coin(cls, coin: Coin) -> "DbCoin":
        return cls(denom=coin.denom, amount=str(coin.amount))

    def value(self) -> str:
        """The composite literal written to the database."""
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, src: Union[bytes, str]) -> "DbCoin":
        values = _strip_single(src)
        return cls(denom=values[0], amount=values[1])

    def to_coin(self) -> Coin:
        try:
            amount = int(self.amount)
        except ValueError as exc:
            raise ValueError(f"invalid coin amount: {self.amount!r}") from exc
        return Coin(self.denom, amount)


@dataclass(frozen=True)
class DbDecCoin:
    """A decimal coin as stored in the database."""

    denom: str
    amount: str

    @classmethod
    def from_dec_coin(cls, coin: DecCoin) -> "DbDecCoin":
        return cls(denom=coin.denom, amount=format_dec(coin.amount))

    def value(self) -> str:
        """The composite literal written to the database."""
        return f"({self.denom},{self.amount})"

    @classmethod
    def parse(cls, src: Union[bytes, str]) -> "DbDecCoin":
        values = _strip_single(src)
        return cls(denom=values[0], amount=values[1])

    def to_dec_coin(self) -> DecCoin:
        return DecCoin(self.denom, _to_decimal(self.amount))


def db_coins_from(coins: Iterable[Coin]) -> list[DbCoin]:
    return [DbCoin.from_coin(coin) for coin in coins]


def parse_db_coins(src: Union[bytes, str]) -> list[DbCoin]:
    """Read an array of coins in the database's text form."""
    return [DbCoin(denom, amount) for denom, amount in _split_many(src)]


def db_coins_to_coins(coins: Iterable[DbCoin]) -> list[Coin]:
    return [coin.to_coin() for coin in coins]


def db_dec_coins_from(coins: Iterable[DecCoin]) -> list[DbDecCoin]:
    return [DbDecCoin.from_dec_coin(coin) for coin in coins]


def parse_db_dec_coins(src: Union[bytes, str]) -> list[DbDecCoin]:
    """Read an array of decimal coins in the database's text form."""
    return [DbDecCoin(denom, amount) for denom, amount in _split_many(src)]


def db_dec_coins_to_dec_coins(coins: Iterable[DbDecCoin]) -> list[DecCoin]:
    return [coin.to_dec_coin() for coin in coins]