import pytest

from abl2tikz.quantities import format_parameter, to_siunitx


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1k1Ohm", r"\SI{1.1}{\kilo\ohm}"),
        ("2.2 uF", r"\SI{2.2}{\micro\farad}"),
        ("100 Ohm", r"\SI{100}{\ohm}"),
        ("10 pF", r"\SI{10}{\pico\farad}"),
        ("4,7 mH", r"\SI{4.7}{\milli\henry}"),
        ("3 MHz", r"\SI{3}{\mega\hertz}"),
        ("5 V", r"\SI{5}{\volt}"),
    ],
)
def test_to_siunitx_with_units(text, expected):
    assert to_siunitx(text) == expected


def test_plain_numbers_use_suggested_unit():
    assert to_siunitx("50", suggested_unit="Ohm") == r"\SI{50}{\ohm}"
    assert to_siunitx("1.5") == r"\num{1.5}"
    assert to_siunitx("1e3", suggested_unit="Hz") == r"\SI{1000}{\hertz}"


def test_force_unit_overrides_given_unit():
    assert to_siunitx("3 V", force_unit="uA") == r"\SI{3}{\micro\ampere}"


@pytest.mark.parametrize("text", ["abc", "R1*2", "12 parsecs", ""])
def test_unparsable_text_is_returned_unchanged(text):
    assert to_siunitx(text) == text


def test_format_parameter():
    assert format_parameter("R", "1k") == r"\SI{1}{\kilo\ohm}"
    assert format_parameter("C", "10") == r"\SI{10}{\micro\farad}"
    assert format_parameter("L", "2.2") == r"\SI{2.2}{\nano\henry}"
    assert format_parameter("Temp", "27") is None
