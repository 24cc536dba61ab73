import pytest

from kanha.services.numbering import (
    fiscal_year_of,
    format_invoice_number,
    next_invoice_number,
    parse_sequence,
)


def test_format_pads_sequence_to_five_digits():
    assert format_invoice_number("MPK", "25-26", 7) == "MPK/25-26/00007"
    assert format_invoice_number("MPK", "25-26", 123456) == "MPK/25-26/123456"


@pytest.mark.parametrize("number,expected", [
    ("MPK/25-26/00007", 7),
    ("MPK/25-26/00100", 100),
    ("  MPK/25-26/00009 ", 9),
    ("MPK/25-26/", None),
    ("", None),
    (None, None),
])
def test_parse_sequence(number, expected):
    assert parse_sequence(number) == expected


def test_next_number_increments_last():
    assert next_invoice_number("MPK/25-26/00007") == "MPK/25-26/00008"
    assert next_invoice_number("MPK/25-26/00099") == "MPK/25-26/00100"


def test_next_number_starts_series_when_nothing_issued():
    assert next_invoice_number(None) == "MPK/25-26/00001"
    assert next_invoice_number("garbage") == "MPK/25-26/00001"


def test_next_number_uses_given_prefix_and_year():
    assert next_invoice_number("MPK/25-26/00041", prefix="KMA", fiscal_year="26-27") == "KMA/26-27/00042"


def test_fiscal_year_of():
    assert fiscal_year_of("MPK/24-25/00003") == "24-25"
    assert fiscal_year_of("00003") is None
