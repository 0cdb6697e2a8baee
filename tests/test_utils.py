from pricing import parse_amount
from utils import format_currency, format_input, format_percent, format_units


def test_format_currency():
    assert format_currency(1234.5) == "£1,234.50"
    assert format_currency(0) == "£0.00"
    assert format_currency(-2) == "-£2.00"
    assert format_currency(float("inf")) == "£0.00"
    assert format_currency(None) == "£0.00"


def test_format_units():
    assert format_units(42.0) == "42"
    assert format_units(1250) == "1,250"
    assert format_units(12.5) == "12.5"


def test_format_percent():
    assert format_percent(50.21) == "50.2%"


def test_format_input_shows_exact_value():
    assert format_input(2.555) == "2.555"
    assert format_input(7.0) == "7"
    assert format_input(10.456) == "10.456"
    assert format_input(1e-05) == "0.00001"
    assert format_input(1e20) == "100000000000000000000"


def test_format_input_parses_back():
    for value in (2.555, 0.1, 10.45, 1e-05, 123456789.125):
        assert parse_amount(format_input(value)) == value
