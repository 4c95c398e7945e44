from backend.services.formatting import (
    format_amount,
    format_compact_number,
    format_compact_number_only,
)


def test_compact_thousands_and_millions():
    assert format_compact_number_only(40000) == "40K"
    assert format_compact_number_only(1280000) == "1.28M"
    assert format_compact_number_only(1500) == "1.5K"
    assert format_compact_number_only(2000000) == "2M"


def test_compact_small_and_invalid_values():
    assert format_compact_number_only(500) == "500"
    assert format_compact_number_only(None) == "0"
    assert format_compact_number_only("abc") == "0"
    assert format_compact_number_only(float("nan")) == "0"


def test_compact_negative():
    assert format_compact_number_only(-40000) == "-40K"


def test_compact_with_currency():
    assert format_compact_number(40000) == "40K MGA"
    assert format_compact_number(1200, "EUR") == "1.2K EUR"


def test_format_amount():
    assert format_amount(1234567.5, "MGA") == "1 234 567.50 MGA"
    assert format_amount(None, "EUR") == "0.00 EUR"
