from decimal import Decimal

import pytest

from chainindexer.coins import format_dec
from chainindexer.validator_rows import (
    DoubleSignEvidenceRow,
    DoubleSignVoteRow,
    ValidatorData,
    ValidatorInfoRow,
    ValidatorRow,
    ValidatorStatusRow,
    ValidatorVotingPowerRow,
    new_validator_commission_row,
    new_validator_description_row,
)

CONS = "cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl"
OPER = "cosmosvaloper1rcp29q3hpd246n6qak7jluqep4v006cdsc2kkl"
PUBKEY = "cosmosvalconspub1zcjduepq7mft6gfls57a0a42d7uhx656cckhfvtrlmw744jv4q0mvlv0dypskehfk8"
SELF = "cosmos1z4hfrxvlgl4s8u4n5ngjcw8kdqrcv43599amxs"


def make_validator(max_rate="1", max_change_rate="2"):
    return ValidatorData(CONS, OPER, PUBKEY, SELF, max_rate, max_change_rate, 1)


def test_validator_data_rates():
    validator = make_validator()
    assert validator.max_rate() == Decimal(1)
    assert validator.max_change_rate() == Decimal(2)
    assert format_dec(validator.max_rate()) == "1.000000000000000000"


def test_validator_data_rejects_fractional_rate():
    with pytest.raises(ValueError):
        make_validator(max_rate="0.05").max_rate()


def test_validator_data_fields():
    validator = make_validator()
    assert validator.consensus_address == CONS
    assert validator.operator_address == OPER
    assert validator.consensus_pubkey == PUBKEY
    assert validator.self_delegate_address == SELF


def test_validator_row_equality():
    assert ValidatorRow(CONS, PUBKEY) == ValidatorRow(CONS, PUBKEY)
    assert not ValidatorRow(CONS, PUBKEY) == ValidatorRow(CONS, "other")


def test_validator_info_row_equality():
    row = ValidatorInfoRow(CONS, OPER, SELF, "1", "2", 10)
    assert row == ValidatorInfoRow(CONS, OPER, SELF, "1", "2", 10)
    assert not row == ValidatorInfoRow(CONS, OPER, SELF, "1", "2", 11)


def test_description_row_null_strings():
    row = new_validator_description_row(
        CONS, "moniker", "identity", "avatar-url", "", "securityContact", "details", 10
    )
    assert row.website is None
    assert row.moniker == "moniker"
    assert row.avatar_url == "avatar-url"


def test_description_row_equals_ignores_avatar():
    a = new_validator_description_row(CONS, "moniker", "", "lower-avatar-url", "", "", "", 10)
    b = new_validator_description_row(CONS, "moniker", "", "new-avatar-url", "", "", "", 10)
    assert a.equals(b)
    assert not a == b
    c = new_validator_description_row(CONS, "moniker", "higher-identity", "", "", "", "", 10)
    assert not a.equals(c)


def test_commission_row():
    row = new_validator_commission_row(CONS, "0.011000000000000000", "12", 10)
    assert row.commission == "0.011000000000000000"
    assert row.min_self_delegation == "12"
    empty = new_validator_commission_row(CONS, "", " ", 10)
    assert empty.commission is None
    assert empty.min_self_delegation is None


def test_voting_power_and_status_rows():
    assert ValidatorVotingPowerRow(CONS, 1000, 10) == ValidatorVotingPowerRow(CONS, 1000, 10)
    assert not ValidatorVotingPowerRow(CONS, 1000, 10) == ValidatorVotingPowerRow(CONS, 10, 11)
    status = ValidatorStatusRow(1, False, False, CONS, 10)
    assert status == ValidatorStatusRow(1, False, False, CONS, 10)
    assert not status == ValidatorStatusRow(3, True, True, CONS, 10)


def test_double_sign_rows():
    vote = DoubleSignVoteRow(
        1,
        1,
        10,
        1,
        "A42C9492F5DE01BFA6117137102C3EF909F1A46C2F56915F542D12AC2D0A5BCA",
        CONS,
        1,
        "1qwPQjPrc7DH7+f6YAE3fOkq6phDAJ60dEyhmcZ7dx2ZgGvi9DbVLsn4leYqRNA/63ZeeH5kVly8zI1jCh4iBg==",
    )
    assert vote.block_id.startswith("A42C")
    assert DoubleSignEvidenceRow(10, 1, 2) == DoubleSignEvidenceRow(10, 1, 2)
    assert not DoubleSignEvidenceRow(10, 1, 2) == DoubleSignEvidenceRow(10, 2, 1)