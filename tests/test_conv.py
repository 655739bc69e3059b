import pytest

from skylight.conv import itoa, utoa


@pytest.mark.parametrize("base", range(2, 17))
@pytest.mark.parametrize("value", [1, 7, 255, 4096, 123456789, 2**63 - 1])
def test_itoa_round_trip_positive(value, base):
    assert int(itoa(value, base), base) == value


@pytest.mark.parametrize("base", range(2, 17))
@pytest.mark.parametrize("value", [-1, -9, -255, -987654321, -(2**63)])
def test_itoa_round_trip_negative(value, base):
    text = itoa(value, base)
    assert text.startswith("-")
    assert int(text, base) == value


@pytest.mark.parametrize("base", range(2, 17))
def test_zero_is_single_digit(base):
    assert itoa(0, base) == "0"
    assert utoa(0, base) == "0"


@pytest.mark.parametrize("base", range(2, 17))
@pytest.mark.parametrize("value", [1, 15, 2**32, 2**64 - 1])
def test_utoa_round_trip(value, base):
    assert int(utoa(value, base), base) == value


def test_digits_are_lowercase():
    text = utoa(0xABCDEF, 16)
    assert text == text.lower()
    assert int(text, 16) == 0xABCDEF


def test_utoa_wraps_negative_to_64_bits():
    assert int(utoa(-1, 16), 16) == 0xFFFFFFFFFFFFFFFF


def test_itoa_wraps_to_signed_64_bits():
    assert int(itoa(0xFFFFFFFFFFFFFFFF, 10)) == -1


def test_binary_max_digits():
    assert len(utoa(0xFFFFFFFFFFFFFFFF, 2)) == 64


@pytest.mark.parametrize("base", [0, 1, 17, 36])
def test_bad_base_raises(base):
    with pytest.raises(ValueError):
        itoa(5, base)
    with pytest.raises(ValueError):
        utoa(5, base)