from decimal import Decimal

import pytest

from chainindexer.coins import (
    Coin,
    DbCoin,
    DbDecCoin,
    DecCoin,
    db_coins_from,
    db_coins_to_coins,
    db_dec_coins_from,
    db_dec_coins_to_dec_coins,
    format_dec,
    parse_db_coins,
    parse_db_dec_coins,
    remove_empty,
    to_null_string,
    to_string,
)


def test_format_dec_pins_eighteen_places():
    assert format_dec(Decimal("0.011")) == "0.011000000000000000"
    assert format_dec("0.7") == "0.700000000000000000"


def test_format_dec_rejects_excess_precision():
    with pytest.raises(ValueError):
        format_dec("0.0000000000000000001")


def test_format_dec_rejects_garbage():
    with pytest.raises(ValueError):
        format_dec("abc")


def test_format_dec_round_trips_through_decimal():
    for text in ["0.05", "12", "3.141592653589793238"]:
        assert Decimal(format_dec(text)) == Decimal(text)


def test_null_string_helpers():
    assert to_null_string("  moniker ") == "moniker"
    assert to_null_string("   ") is None
    assert to_string(None) == ""
    assert to_string("identity") == "identity"


def test_remove_empty():
    assert remove_empty(["a", "", "b", ""]) == ["a", "b"]
    assert remove_empty([]) == []


def test_coin_validation():
    with pytest.raises(ValueError):
        Coin("uatom", -1)
    with pytest.raises(ValueError):
        Coin("1bad", 1)
    with pytest.raises(TypeError):
        Coin("uatom", "10")


def test_dec_coin_normalises_amount():
    coin = DecCoin("uatom", "1.5")
    assert coin.amount == Decimal("1.5")
    with pytest.raises(ValueError):
        DecCoin("uatom", "-2")


def test_db_coin_value_and_parse():
    coin = DbCoin("uatom", "100")
    assert coin.value() == "(uatom,100)"
    assert DbCoin.parse(coin.value().encode()) == coin
    assert DbCoin.parse(b'("uatom","100")') == coin


def test_db_coin_parse_invalid():
    with pytest.raises(ValueError):
        DbCoin.parse(b"nocomma")


def test_db_coin_round_trip_to_coin():
    coin = Coin("stake", 12345)
    assert DbCoin.from_coin(coin).to_coin() == coin


def test_db_coin_invalid_amount():
    with pytest.raises(ValueError):
        DbCoin("uatom", "notanumber").to_coin()


def test_parse_db_coins_array():
    parsed = parse_db_coins(b'{"(uatom,100)","(stake,5)"}')
    assert parsed == [DbCoin("uatom", "100"), DbCoin("stake", "5")]
    assert parse_db_coins(b"{}") == []


def test_db_coins_round_trip():
    coins = [Coin("uatom", 1), Coin("stake", 20)]
    db_coins = db_coins_from(coins)
    text = "{" + ",".join(f'"{c.value()}"' for c in db_coins) + "}"
    assert parse_db_coins(text) == db_coins
    assert db_coins_to_coins(parse_db_coins(text)) == coins


def test_db_dec_coin_from_dec_coin():
    db_coin = DbDecCoin.from_dec_coin(DecCoin("uatom", Decimal("0.011")))
    assert db_coin.amount == "0.011000000000000000"
    assert DbDecCoin.parse(db_coin.value()) == db_coin
    assert db_coin.to_dec_coin() == DecCoin("uatom", Decimal("0.011"))


def test_db_dec_coins_round_trip():
    coins = [DecCoin("uatom", Decimal("1.25")), DecCoin("stake", Decimal("3"))]
    db_coins = db_dec_coins_from(coins)
    text = "{" + ",".join(f'"{c.value()}"' for c in db_coins) + "}"
    parsed = parse_db_dec_coins(text.encode())
    assert parsed == db_coins
    assert db_dec_coins_to_dec_coins(parsed) == coins


def test_parse_db_dec_coins_invalid():
    with pytest.raises(ValueError):
        parse_db_dec_coins("{(uatom)}")