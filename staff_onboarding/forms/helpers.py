"""Formatting and field checks shared by the onboarding forms."""

import math
import re
from datetime import date, datetime

from .constants import DEFAULT_SALARY_BREAKDOWN

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UAE_IBAN_RE = re.compile(r"^AE\d{21}$")
_SALARY_TOLERANCE = 0.01


def format_date_display(iso_date: str | None) -> str:
    """Format an ISO date (or datetime) as ``DD.MM.YYYY``.

    Returns an empty string for empty input.
    """
    if not iso_date:
        return ""
    parsed = _parse_iso(iso_date)
    return parsed.strftime("%d.%m.%Y")


def parse_date_to_iso(display_date: str) -> str:
    """Convert ``DD.MM.YYYY`` to ``YYYY-MM-DD``.

    Day and month are zero-padded. Anything that does not split into
    three parts yields an empty string.
    """
    parts = display_date.split(".")
    if len(parts) != 3:
        return ""
    day, month, year = parts
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def format_date_for_input(iso_date: str | None) -> str:
    """Strip the time component from an ISO timestamp."""
    if not iso_date:
        return ""
    return iso_date.split("T")[0]


def _parse_iso(value: str) -> date:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if "T" in text:
        return datetime.fromisoformat(text).date()
    return date.fromisoformat(text)


def calculate_salary_breakdown(total: float) -> dict[str, float]:
    """Split a monthly total using the default UAE percentages.

    Each component is rounded to cents; whatever rounding leaves over is
    added to the basic salary so the parts always add up to ``total``.

    Args:
        total: Monthly salary.

    Returns:
        Mapping with ``basic``, ``accommodation``, ``transport``, ``food``
        and ``other``.
    """
    basic = round(total * DEFAULT_SALARY_BREAKDOWN["basic"], 2)
    accommodation = round(total * DEFAULT_SALARY_BREAKDOWN["accommodation"], 2)
    transport = round(total * DEFAULT_SALARY_BREAKDOWN["transport"], 2)
    food = 0.0
    other = 0.0

    remainder = total - (basic + accommodation + transport + food + other)
    return {
        "basic": round(basic + remainder, 2),
        "accommodation": accommodation,
        "transport": transport,
        "food": food,
        "other": other,
    }


def validate_salary_breakdown(
    total: float,
    basic: float,
    accommodation: float,
    transport: float,
    food: float = 0.0,
    other: float = 0.0,
) -> tuple[bool, float]:
    """Check that salary components add up to the total.

    Returns:
        Tuple of (valid, absolute difference).
    """
    difference = abs((basic + accommodation + transport + food + other) - total)
    return difference < _SALARY_TOLERANCE, difference


def calculate_full_name(first_name: str, middle_name: str | None, last_name: str) -> str:
    """Join the non-empty name parts with single spaces."""
    return " ".join(part for part in (first_name, middle_name, last_name) if part)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_valid_uae_mobile(number: str) -> bool:
    """UAE mobiles are ten digits starting with ``05`` once formatting is removed."""
    cleaned = re.sub(r"\D", "", number)
    return len(cleaned) == 10 and cleaned.startswith("05")


def is_valid_iban(iban: str) -> bool:
    """Basic UAE IBAN check: ``AE`` + 2 check digits + 3 bank code + 16 account."""
    cleaned = re.sub(r"\s", "", iban).upper()
    return bool(_UAE_IBAN_RE.match(cleaned))


def format_currency(amount: float | None, currency: str = "AED") -> str:
    if amount is None or math.isnan(amount):
        return ""
    return f"{currency} {amount:,.2f}"


def pluralize(value: float | None, singular: str) -> str:
    """``"month"`` for exactly one, ``"months"`` otherwise (including unknown)."""
    if value is None:
        return singular + "s"
    return singular if value == 1 else singular + "s"


def time_period_options(value: float | None) -> list[dict[str, str]]:
    """Unit choices labelled to agree with the entered number."""
    return [
        {"value": unit, "label": pluralize(value, unit[:-1])}
        for unit in ("days", "weeks", "months")
    ]
