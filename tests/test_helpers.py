"""Tests for the form formatting and field-check helpers."""

import math

import pytest

from staff_onboarding.forms.helpers import (
    calculate_full_name,
    calculate_salary_breakdown,
    format_currency,
    format_date_display,
    format_date_for_input,
    is_valid_email,
    is_valid_iban,
    is_valid_uae_mobile,
    parse_date_to_iso,
    pluralize,
    time_period_options,
    validate_salary_breakdown,
)


class TestDates:
    """Tests for date display and parsing."""

    def test_format_display(self) -> None:
        assert format_date_display("2024-03-05") == "05.03.2024"

    def test_format_display_timestamp(self) -> None:
        assert format_date_display("2024-03-05T10:30:00Z") == "05.03.2024"

    def test_format_display_empty(self) -> None:
        assert format_date_display("") == ""
        assert format_date_display(None) == ""

    def test_parse_to_iso_pads(self) -> None:
        assert parse_date_to_iso("5.3.2024") == "2024-03-05"
        assert parse_date_to_iso("15.12.1990") == "1990-12-15"

    def test_parse_to_iso_wrong_shape(self) -> None:
        assert parse_date_to_iso("2024-03-05") == ""
        assert parse_date_to_iso("") == ""

    def test_format_for_input_strips_time(self) -> None:
        assert format_date_for_input("2024-03-05T10:30:00Z") == "2024-03-05"
        assert format_date_for_input(None) == ""


class TestSalary:
    """Tests for salary breakdown helpers."""

    def test_default_split(self) -> None:
        parts = calculate_salary_breakdown(10000)
        assert parts == {
            "basic": 6000.0,
            "accommodation": 3000.0,
            "transport": 1000.0,
            "food": 0.0,
            "other": 0.0,
        }

    def test_split_always_adds_up(self) -> None:
        for total in (1234.57, 9999.99, 333.33, 0.01):
            parts = calculate_salary_breakdown(total)
            assert math.isclose(sum(parts.values()), total, abs_tol=0.005)

    def test_validate_matching(self) -> None:
        valid, difference = validate_salary_breakdown(10000, 6000, 3000, 1000)
        assert valid is True
        assert difference == 0

    def test_validate_mismatch(self) -> None:
        valid, difference = validate_salary_breakdown(10000, 6000, 3000, 500)
        assert valid is False
        assert difference == 500

    def test_validate_within_tolerance(self) -> None:
        valid, _ = validate_salary_breakdown(100.0, 60.0, 30.0, 10.005)
        assert valid is True


class TestFieldChecks:
    """Tests for email, mobile and IBAN checks."""

    @pytest.mark.parametrize("email", ["a@b.co", "first.last@example.ae"])
    def test_valid_emails(self, email: str) -> None:
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", "plain", "a@b", "a b@c.com", "@b.com"])
    def test_invalid_emails(self, email: str) -> None:
        assert is_valid_email(email) is False

    def test_uae_mobile_formatting_ignored(self) -> None:
        assert is_valid_uae_mobile("050 123 4567") is True
        assert is_valid_uae_mobile("050-123-4567") is True

    def test_uae_mobile_rejects_other_numbers(self) -> None:
        assert is_valid_uae_mobile("+971501234567") is False
        assert is_valid_uae_mobile("0412345678") is False
        assert is_valid_uae_mobile("05012345") is False

    def test_iban(self) -> None:
        assert is_valid_iban("AE07 0331 2345 6789 0123 456") is True
        assert is_valid_iban("ae070331234567890123456") is True

    def test_iban_rejects_wrong_country_or_length(self) -> None:
        assert is_valid_iban("GB07033123456789012345") is False
        assert is_valid_iban("AE0703312345678901234") is False


class TestDisplay:
    """Tests for names, currency and unit labels."""

    def test_full_name_skips_missing_middle(self) -> None:
        assert calculate_full_name("Jane", None, "Doe") == "Jane Doe"
        assert calculate_full_name("Jane", "Q", "Doe") == "Jane Q Doe"
        assert calculate_full_name("Jane", "", "Doe") == "Jane Doe"

    def test_format_currency(self) -> None:
        assert format_currency(1234.5) == "AED 1,234.50"
        assert format_currency(99, "EUR") == "EUR 99.00"

    def test_format_currency_missing(self) -> None:
        assert format_currency(None) == ""
        assert format_currency(float("nan")) == ""

    def test_pluralize(self) -> None:
        assert pluralize(1, "month") == "month"
        assert pluralize(6, "month") == "months"
        assert pluralize(None, "day") == "days"

    def test_time_period_options(self) -> None:
        options = time_period_options(1)
        assert [o["value"] for o in options] == ["days", "weeks", "months"]
        assert [o["label"] for o in options] == ["day", "week", "month"]
        assert time_period_options(3)[2]["label"] == "months"
