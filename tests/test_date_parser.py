"""Tests for date parsing and CLI date helpers."""

from datetime import date, timedelta

import click
import pytest

from ledgerbook.cli.date_filters import resolve_cli_date_range
from ledgerbook.utils.amount_parser import parse_decimal, parse_position, split_assignment
from ledgerbook.utils.date_parser import get_date_range, parse_date
from ledgerbook.domain.amount import Amount


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_parse_absolute_dates():
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("15.01.2024") == date(2024, 1, 15)
    assert parse_date("03.02.2024") == date(2024, 2, 3)


def test_parse_relative_dates():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date(" Yesterday ") == today - timedelta(days=1)
    end_of_last_month = parse_date("end of last month")
    assert end_of_last_month == today.replace(day=1) - timedelta(days=1)
    assert parse_date("end of last year") == date(today.year - 1, 12, 31)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_get_date_range():
    assert get_date_range("2024") == (date(2024, 1, 1), date(2024, 12, 31))
    assert get_date_range("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    start, end = get_date_range("last-month")
    assert start.day == 1
    assert end == date.today().replace(day=1) - timedelta(days=1)
    start, end = get_date_range("last-year")
    assert (start, end) == (date(date.today().year - 1, 1, 1), date(date.today().year - 1, 12, 31))
    assert get_date_range("this-year") == (date.today().replace(month=1, day=1), date.today())
    with pytest.raises(ValueError):
        get_date_range("2024-13")
    with pytest.raises(ValueError):
        get_date_range("someday")


def test_resolve_cli_date_range_rejects_period_with_dates(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(_ctx(), start_date="2024-01-01", end_date=None, period="2024")

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_resolve_cli_date_range_period_and_dates():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period="2023") == (
        date(2023, 1, 1),
        date(2023, 12, 31),
    )
    assert resolve_cli_date_range(_ctx(), start_date="2024-03-01", end_date=None, period=None) == (
        date(2024, 3, 1),
        None,
    )


def test_resolve_cli_date_range_invalid_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date="gestern vielleicht", end_date=None, period=None)
    assert "Invalid start date" in capsys.readouterr().err


def test_position_specs():
    assert split_assignment("Ausgaben : Büro = 12,50") == ("Ausgaben : Büro", "12,50")
    position = parse_position("Ausgaben:Büro=-1.234,56", "EUR")
    assert position.account_path == "Ausgaben:Büro"
    assert position.amount == Amount(-123456, "EUR")
    with pytest.raises(ValueError):
        split_assignment("Ausgaben : Büro")
    with pytest.raises(ValueError):
        split_assignment("=12")


def test_parse_decimal():
    assert str(parse_decimal("19,5")) == "19.5"
    assert str(parse_decimal("-0.3333")) == "-0.3333"
    with pytest.raises(ValueError):
        parse_decimal("viel")
