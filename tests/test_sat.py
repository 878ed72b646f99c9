import pytest

from ordkit.sat import (
    COIN_VALUE,
    DIFFCHANGE_INTERVAL,
    SUBSIDY_HALVING_INTERVAL,
    Degree,
    Rarity,
    Sat,
    SatDecimal,
    epoch_starting_sats,
    starting_sat,
    subsidy,
)


def parse(text):
    return Sat.parse(text)


def test_n():
    assert Sat(1).n == 1
    assert Sat(100).n == 100
    assert Sat(2099999997689999).n == 2099999997689999


def test_height():
    assert Sat(0).height() == 0
    assert Sat(1).height() == 0
    assert Sat(subsidy(0)).height() == 1
    assert Sat(subsidy(0) * 2).height() == 2
    assert epoch_starting_sats()[2].height() == SUBSIDY_HALVING_INTERVAL * 2
    assert Sat(50 * COIN_VALUE).height() == 1
    assert Sat(2099999997689999).height() == 6929999


@pytest.mark.parametrize(
    "n, name",
    [
        (0, "nvtdijuwxlp"),
        (1, "nvtdijuwxlo"),
        (26, "nvtdijuwxkp"),
        (27, "nvtdijuwxko"),
        (2099999997689999, "a"),
        (2099999997689999 - 1, "b"),
        (2099999997689999 - 25, "z"),
        (2099999997689999 - 26, "aa"),
    ],
)
def test_name(n, name):
    assert Sat(n).name() == name


@pytest.mark.parametrize(
    "n, degree",
    [
        (0, "0°0′0″0‴"),
        (1, "0°0′0″1‴"),
        (50 * COIN_VALUE - 1, "0°0′0″4999999999‴"),
        (50 * COIN_VALUE, "0°1′1″0‴"),
        (50 * COIN_VALUE + 1, "0°1′1″1‴"),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL - 1, "0°2015′2015″4999999999‴"),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL, "0°2016′0″0‴"),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL + 1, "0°2016′0″1‴"),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL - 1, "0°209999′335″4999999999‴"),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL, "0°0′336″0‴"),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL + 1, "0°0′336″1‴"),
        (2067187500000000 - 1, "0°209999′2015″156249999‴"),
        (2067187500000000, "1°0′0″0‴"),
        (2067187500000000 + 1, "1°0′0″1‴"),
    ],
)
def test_degree(n, degree):
    assert str(Sat(n).degree()) == degree


def test_degree_fields():
    assert Sat(50 * COIN_VALUE + 1).degree() == Degree(hour=0, minute=1, second=1, third=1)


def test_invalid_degree_bugfix():
    assert str(Sat(1054200000000000).degree()) == "0°1680′0″0‴"
    assert parse("0°1680′0″0‴") == 1054200000000000
    assert str(Sat(1914226250000000).degree()) == "0°122762′794″0‴"
    assert parse("0°122762′794″0‴") == 1914226250000000


@pytest.mark.parametrize(
    "n, period",
    [
        (0, 0),
        (10080000000000, 1),
        (2099999997689999, 3437),
        (10075000000000, 0),
        (10080000000000 - 1, 0),
        (10080000000000 + 1, 1),
        (10085000000000, 1),
    ],
)
def test_period(n, period):
    assert Sat(n).period() == period


def test_epoch():
    assert Sat(0).epoch() == 0
    assert Sat(1).epoch() == 0
    assert Sat(50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL).epoch() == 1
    assert Sat(2099999997689999).epoch() == 32


def test_epoch_position():
    sats = epoch_starting_sats()
    assert sats[0].epoch_position() == 0
    assert (sats[0] + 100).epoch_position() == 100
    assert sats[1].epoch_position() == 0
    assert sats[2].epoch_position() == 0


def test_subsidy_position():
    assert Sat(0).third() == 0
    assert Sat(1).third() == 1
    assert Sat(subsidy(0) - 1).third() == subsidy(0) - 1
    assert Sat(subsidy(0)).third() == 0
    assert Sat(subsidy(0) + 1).third() == 1
    epoch_one = epoch_starting_sats()[1]
    assert Sat(epoch_one.n + subsidy(SUBSIDY_HALVING_INTERVAL)).third() == 0
    assert Sat.LAST.third() == 0


def test_supply_boundaries():
    assert subsidy(6929999) == 1
    assert subsidy(6930000) == 0
    assert starting_sat(6930000) == Sat.SUPPLY
    assert Sat.SUPPLY == 2099999997690000
    assert epoch_starting_sats()[-1] == Sat.SUPPLY


def test_epoch_starting_sats():
    sats = epoch_starting_sats()
    assert len(sats) == 34
    assert sats[0] == 0
    assert sats[1] == 50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL
    assert sats == sorted(sats)


def test_starting_sat():
    assert starting_sat(0) == 0
    assert starting_sat(1) == 50 * COIN_VALUE
    assert starting_sat(SUBSIDY_HALVING_INTERVAL) == 1050000000000000


def test_last():
    assert Sat.LAST == Sat.SUPPLY - 1
    assert parse("2099999997689999") == Sat.LAST
    assert Sat.LAST.name() == "a"
    assert parse("a") == Sat.LAST


def test_eq():
    assert Sat(0) == 0
    assert Sat(1) == 1
    assert Sat(3) == Sat(3)


def test_partial_ord():
    assert Sat(1) > 0
    assert Sat(0) < 1
    assert Sat(2) > Sat(1)


def test_add():
    assert Sat(0) + 1 == 1
    assert Sat(1) + 100 == 101


def test_add_assign():
    sat = Sat(0)
    sat += 1
    assert sat == 1
    sat += 100
    assert sat == 101


def test_from_str_decimal():
    assert parse("0.0") == 0
    assert parse("0.1") == 1
    assert parse("1.0") == 50 * COIN_VALUE
    assert parse("6929999.0") == 2099999997689999
    with pytest.raises(ValueError):
        parse("0.5000000000")
    with pytest.raises(ValueError):
        parse("6930000.0")


def test_decimal():
    assert Sat(50 * COIN_VALUE + 1).decimal() == SatDecimal(height=1, offset=1)
    assert str(Sat(50 * COIN_VALUE + 1).decimal()) == "1.1"


@pytest.mark.parametrize(
    "text, n",
    [
        ("0°0′0″0‴", 0),
        ("0°0′0″", 0),
        ("0°0′0″1‴", 1),
        ("0°2015′2015″0‴", 10075000000000),
        ("0°2016′0″0‴", 10080000000000),
        ("0°2017′1″0‴", 10085000000000),
        ("0°2016′0″1‴", 10080000000001),
        ("0°2017′1″1‴", 10085000000001),
        ("0°209999′335″0‴", 1049995000000000),
        ("0°0′336″0‴", 1050000000000000),
        ("0°0′672″0‴", 1575000000000000),
        ("0°209999′1007″0‴", 1837498750000000),
        ("0°0′1008″0‴", 1837500000000000),
        ("1°0′0″0‴", 2067187500000000),
        ("2°0′0″0‴", 2099487304530000),
        ("3°0′0″0‴", 2099991988080000),
        ("4°0′0″0‴", 2099999873370000),
        ("5°0′0″0‴", 2099999996220000),
        ("5°1′673″0‴", 2099999997480001),
        ("5°209999′1007″0‴", 2099999997689999),
    ],
)
def test_from_str_degree(text, n):
    assert parse(text) == n


def test_from_str_number():
    assert parse("0") == 0
    assert parse("2099999997689999") == 2099999997689999
    with pytest.raises(ValueError, match="invalid sat"):
        parse("2099999997690000")


@pytest.mark.parametrize(
    "valid, invalid",
    [
        ("5°0′0″0‴", "6°0′0″0‴"),
        ("0°209999′335″0‴", "0°210000′336″0‴"),
        ("0°2015′2015″0‴", "0°2016′2016″0‴"),
        ("0°0′0″4999999999‴", "0°0′0″5000000000‴"),
        ("0°209999′335″4999999999‴", "0°0′336″4999999999‴"),
        ("0°2016′0″0‴", "0°2016′1″0‴"),
        ("5°209999′1007″0‴", "5°0′1008″0‴"),
    ],
)
def test_from_str_degree_valid_and_invalid(valid, invalid):
    assert isinstance(parse(valid).n, int)
    with pytest.raises(ValueError):
        parse(invalid)


def test_from_str_degree_relationship_message():
    with pytest.raises(ValueError, match="multiple of 336"):
        parse("0°2016′1″0‴")


def test_from_str_degree_trailing_characters():
    with pytest.raises(ValueError, match="trailing characters"):
        parse("0°0′0″0‴1")


def test_from_str_name():
    assert parse("nvtdijuwxlp") == 0
    assert parse("a") == 2099999997689999
    with pytest.raises(ValueError):
        parse("(")
    with pytest.raises(ValueError):
        parse("")
    with pytest.raises(ValueError, match="out of range"):
        parse("nvtdijuwxlq")


def test_cycle():
    assert Sat(0).cycle() == 0
    assert Sat(2067187500000000 - 1).cycle() == 0
    assert Sat(2067187500000000).cycle() == 1
    assert Sat(2067187500000000 + 1).cycle() == 1


def test_third():
    assert Sat(0).third() == 0
    assert Sat(50 * COIN_VALUE - 1).third() == 4999999999
    assert Sat(50 * COIN_VALUE).third() == 0
    assert Sat(50 * COIN_VALUE + 1).third() == 1


def test_percentile():
    assert Sat(0).percentile() == "0%"
    assert Sat(Sat.LAST.n // 2).percentile() == "49.99999999999998%"
    assert Sat.LAST.percentile() == "100%"


def test_small_percentile_has_no_exponent():
    text = Sat(1).percentile()
    assert "e" not in text
    assert text.startswith("0.0000000000000")
    assert parse(text) == 1


def test_from_percentile():
    with pytest.raises(ValueError):
        parse("-1%")
    with pytest.raises(ValueError):
        parse("101%")
    assert parse("0%") == 0


def test_percentile_round_trip():
    last = Sat.LAST.n
    for n in range(1024):
        for value in (n, last // 2 + n, last - n, last // (n + 1)):
            expected = Sat(value)
            assert parse(expected.percentile()) == expected


@pytest.mark.parametrize(
    "n",
    [
        0,
        1,
        50 * COIN_VALUE - 1,
        50 * COIN_VALUE,
        50 * COIN_VALUE + 1,
        2067187500000000 - 1,
        2067187500000000,
        2067187500000000 + 1,
    ],
)
def test_is_common(n):
    assert Sat(n).is_common() == (Sat(n).rarity() == Rarity.COMMON)


@pytest.mark.parametrize(
    "n, rarity",
    [
        (0, Rarity.MYTHIC),
        (1, Rarity.COMMON),
        (50 * COIN_VALUE - 1, Rarity.COMMON),
        (50 * COIN_VALUE, Rarity.UNCOMMON),
        (50 * COIN_VALUE + 1, Rarity.COMMON),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL - 1, Rarity.COMMON),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL, Rarity.RARE),
        (50 * COIN_VALUE * DIFFCHANGE_INTERVAL + 1, Rarity.COMMON),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL - 1, Rarity.COMMON),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL, Rarity.EPIC),
        (50 * COIN_VALUE * SUBSIDY_HALVING_INTERVAL + 1, Rarity.COMMON),
        (2067187500000000 - 1, Rarity.COMMON),
        (2067187500000000, Rarity.LEGENDARY),
        (2067187500000000 + 1, Rarity.COMMON),
    ],
)
def test_rarity(n, rarity):
    assert Sat(n).rarity() == rarity
    assert Rarity.from_sat(Sat(n)) == rarity


@pytest.mark.parametrize(
    "text, rarity",
    [
        ("common", Rarity.COMMON),
        ("uncommon", Rarity.UNCOMMON),
        ("rare", Rarity.RARE),
        ("epic", Rarity.EPIC),
        ("legendary", Rarity.LEGENDARY),
        ("mythic", Rarity.MYTHIC),
    ],
)
def test_rarity_from_str_round_trip(text, rarity):
    actual = Rarity.parse(text)
    assert actual == rarity
    assert str(actual) == text
    assert Rarity.parse(str(actual)) == rarity


def test_rarity_from_str_err():
    with pytest.raises(ValueError, match="invalid rarity: abc"):
        Rarity.parse("abc")
    with pytest.raises(ValueError):
        Rarity.parse("")


def test_rarity_ordering():
    assert Rarity.parse("common") < Rarity.parse("uncommon") < Rarity.parse("rare")
    assert Rarity.parse("rare") < Rarity.parse("epic") < Rarity.parse("legendary")
    assert Rarity.parse("legendary") < Rarity.parse("mythic")
    assert Sat(1).rarity() < Sat(50 * COIN_VALUE).rarity() < Sat(0).rarity()


def test_sat_str():
    assert str(Sat(42)) == "42"


def test_negative_sat_rejected():
    with pytest.raises(ValueError):
        Sat(-1)