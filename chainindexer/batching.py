"""Splitting of bulk inserts under the database parameter limit."""

from __future__ import annotations

from typing import Iterable, TypeVar

MAX_POSTGRESQL_PARAMS = 65535

T = TypeVar("T")


def split_accounts(accounts: Iterable[T], params_number: int) -> list[list[T]]:
    """Split the accounts into batches that fit the parameter limit.

    The first batch holds up to ``65535 // params_number`` accounts and each
    later one one fewer; trailing batches may be empty.
    """
    if params_number <= 0:
        raise ValueError(f"invalid number of parameters: {params_number}")
    per_batch = MAX_POSTGRESQL_PARAMS // params_number
    if per_batch < 2:
        raise ValueError(
            f"too many parameters per account to split into batches: {params_number}"
        )

    items = list(accounts)
    batches: list[list[T]] = [[] for _ in range(len(items) // per_batch + 1)]
    current = 0
    for index, account in enumerate(items):
        if current == len(batches):
            batches.append([])
        batches[current].append(account)
        if index > 0 and index % (per_batch - 1) == 0:
            current += 1
    return batches