"""Configurable validation rules for the employer and employee forms.

Rules are loaded per form from YAML (field name -> list of rule dicts)
and produce the same messages the form shows next to each field.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from staff_onboarding.forms import constants
from staff_onboarding.forms.helpers import (
    is_valid_email,
    is_valid_iban,
    is_valid_uae_mobile,
    validate_salary_breakdown,
)
from staff_onboarding.utils.logger import get_logger

logger = get_logger(__name__)

_OPTION_TABLES: dict[str, tuple[str, ...]] = {
    "job_titles": constants.JOB_TITLES,
    "departments": constants.DEPARTMENTS,
    "religions": constants.RELIGIONS,
    "educational_qualifications": constants.EDUCATIONAL_QUALIFICATIONS,
    "languages": constants.LANGUAGES,
    "nationalities": constants.NATIONALITIES,
    "titles": constants.TITLES,
    "marital_status_options": constants.MARITAL_STATUS_OPTIONS,
    "uae_banks": constants.UAE_BANKS,
    "salary_currencies": constants.option_values(constants.SALARY_CURRENCIES),
    "weekly_off_options": constants.option_values(constants.WEEKLY_OFF_OPTIONS),
    "time_period_units": constants.option_values(constants.TIME_PERIOD_UNITS),
    "leave_types": constants.option_values(constants.LEAVE_TYPES),
    "uae_presence_options": constants.option_values(constants.UAE_PRESENCE_OPTIONS),
}

_SALARY_PARTS = (
    "salary_basic",
    "salary_accommodation",
    "salary_transport",
    "salary_food",
    "salary_other",
)


@dataclass
class ValidationResult:
    """Result of a single field validation check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


@dataclass
class ValidationReport:
    """Aggregated validation report for one form submission."""

    all_valid: bool
    results: list[ValidationResult]
    warnings: list[str] = field(default_factory=list)

    @property
    def errors(self) -> dict[str, str]:
        """First failing message per field, in rule order."""
        errors: dict[str, str] = {}
        for result in self.results:
            if not result.is_valid and result.field_name not in errors:
                errors[result.field_name] = result.message
        return errors


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return not str(value).strip()


class RulesEngine:
    """Form rules engine.

    Applies field-level rules loaded from a YAML file, plus the salary
    cross-check on the employer form.

    Args:
        rules_path: Path to the form rules YAML file.
    """

    def __init__(self, rules_path: Path = Path("configs/form_rules.yaml")) -> None:
        self.rules = self._load_rules(rules_path)
        self._validators: dict[str, Any] = {
            "required": self._validate_required,
            "required_if": self._validate_required_if,
            "email": self._validate_email,
            "uae_mobile": self._validate_uae_mobile,
            "iban": self._validate_iban,
            "min": self._validate_min,
            "choice": self._validate_choice,
            "iso_date": self._validate_iso_date,
            "non_empty_list": self._validate_non_empty_list,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load form rules from YAML, falling back to the built-in set."""
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded form rules from %s", path)
                    return data
        logger.debug("Using default form rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        """Rules matching what the onboarding forms enforce."""
        required = {"type": "required"}
        positive = {"type": "min", "value": 0, "message": "Must be positive"}
        return {
            "employer": {
                "job_title": [required],
                "job_title_custom": [
                    {
                        "type": "required_if",
                        "field": "job_title",
                        "equals": "Other",
                        "message": "Please specify job title",
                    }
                ],
                "department": [required],
                "department_custom": [
                    {
                        "type": "required_if",
                        "field": "department",
                        "equals": "Other",
                        "message": "Please specify department",
                    }
                ],
                "salary_currency": [
                    required,
                    {"type": "choice", "options": "salary_currencies"},
                ],
                "salary_total": [
                    required,
                    {
                        "type": "min",
                        "value": 0,
                        "exclusive": True,
                        "message": "Salary must be greater than zero",
                    },
                ],
                "annual_leave_days": [required, positive],
                "annual_leave_type": [{"type": "choice", "options": "leave_types"}],
                "notice_period_value": [required, positive],
                "notice_period_unit": [
                    {"type": "choice", "options": "time_period_units"}
                ],
                "probation_period_value": [required, positive],
                "probation_period_unit": [
                    {"type": "choice", "options": "time_period_units"}
                ],
                "weekly_off": [
                    required,
                    {"type": "choice", "options": "weekly_off_options"},
                ],
                "starting_date": [required, {"type": "iso_date"}],
            },
            "employee": {
                "title": [required],
                "first_name": [required],
                "last_name": [required],
                "nationality": [required],
                "date_of_birth": [{"type": "iso_date"}],
                "passport_expiry": [{"type": "iso_date"}],
                "father_full_name": [required],
                "mother_full_name": [required],
                "religion": [required],
                "marital_status": [required],
                "spouse_name": [
                    {"type": "required_if", "field": "marital_status", "equals": "Married"}
                ],
                "home_address": [required],
                "uae_presence": [{"type": "choice", "options": "uae_presence_options"}],
                "personal_email": [required, {"type": "email"}],
                "company_email": [{"type": "email"}],
                "mobile_uae": [required, {"type": "uae_mobile"}],
                "educational_qualification": [required],
                "languages_spoken": [
                    {"type": "non_empty_list", "message": "Select at least one"}
                ],
                "bank_name": [{"type": "required_if", "field": "has_uae_bank"}],
                "bank_account_name": [{"type": "required_if", "field": "has_uae_bank"}],
                "bank_iban": [
                    {"type": "required_if", "field": "has_uae_bank"},
                    {"type": "iban"},
                ],
            },
        }

    def validate(self, fields: dict[str, Any], form: str) -> ValidationReport:
        """Validate submitted form values.

        Args:
            fields: Field name-value pairs as submitted.
            form: ``"employer"`` or ``"employee"``.

        Returns:
            Validation report with per-rule results.
        """
        results: list[ValidationResult] = []
        warnings: list[str] = []

        form_rules = self.rules.get(form, {})

        for field_name, rules in form_rules.items():
            value = fields.get(field_name)

            for rule in rules:
                rule_type = rule.get("type")
                validator = self._validators.get(rule_type)

                if not validator:
                    warnings.append(f"Unknown rule type: {rule_type}")
                    continue

                results.append(validator(field_name, value, rule, fields))

        if form == "employer":
            results.extend(self._cross_validate_salary(fields))

        all_valid = all(r.is_valid for r in results)
        logger.info(
            "Validation for %s form: %s (%d checks)",
            form,
            "PASSED" if all_valid else "FAILED",
            len(results),
        )

        return ValidationReport(all_valid=all_valid, results=results, warnings=warnings)

    def _validate_required(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        """Check that a field is present and non-empty."""
        if not _is_blank(value):
            return ValidationResult(field_name, True, "Required field present", "required")
        return ValidationResult(
            field_name, False, rule.get("message", "Required"), "required"
        )

    def _validate_required_if(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        """Required only when another field has a given value (or is truthy)."""
        other = fields.get(rule.get("field", ""))
        if "equals" in rule:
            applies = other == rule["equals"]
        else:
            applies = bool(other)

        if not applies or not _is_blank(value):
            return ValidationResult(field_name, True, "Condition satisfied", "required_if")
        return ValidationResult(
            field_name, False, rule.get("message", "Required"), "required_if"
        )

    def _validate_email(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "email")
        if is_valid_email(str(value)):
            return ValidationResult(field_name, True, "Valid email format", "email")
        return ValidationResult(
            field_name, False, rule.get("message", "Invalid email format"), "email"
        )

    def _validate_uae_mobile(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "uae_mobile")
        if is_valid_uae_mobile(str(value)):
            return ValidationResult(field_name, True, "Valid UAE mobile", "uae_mobile")
        return ValidationResult(
            field_name,
            False,
            rule.get("message", "Invalid UAE mobile number (05X XXX XXXX)"),
            "uae_mobile",
        )

    def _validate_iban(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "iban")
        if is_valid_iban(str(value)):
            return ValidationResult(field_name, True, "Valid UAE IBAN", "iban")
        return ValidationResult(
            field_name, False, rule.get("message", "Invalid UAE IBAN format"), "iban"
        )

    def _validate_min(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        """Numeric lower bound; ``exclusive`` makes the bound itself invalid."""
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "min")

        message = rule.get("message", "Must be positive")
        try:
            number = float(value)
        except (TypeError, ValueError):
            return ValidationResult(field_name, False, "Must be a number", "min")

        bound = float(rule.get("value", 0))
        ok = number > bound if rule.get("exclusive") else number >= bound
        if ok:
            return ValidationResult(field_name, True, "Within range", "min")
        return ValidationResult(field_name, False, message, "min")

    def _validate_choice(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        """Value must be one of a named option table or an inline list."""
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "choice")

        options = rule.get("options", ())
        if isinstance(options, str):
            options = _OPTION_TABLES.get(options, ())

        if value in options:
            return ValidationResult(field_name, True, "Known option", "choice")
        return ValidationResult(
            field_name, False, rule.get("message", f"Invalid option: {value}"), "choice"
        )

    def _validate_iso_date(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(field_name, True, "No value to validate", "iso_date")
        try:
            date.fromisoformat(str(value).split("T")[0])
        except ValueError:
            return ValidationResult(
                field_name, False, rule.get("message", "Invalid date"), "iso_date"
            )
        return ValidationResult(field_name, True, "Valid date", "iso_date")

    def _validate_non_empty_list(
        self, field_name: str, value: Any, rule: dict, fields: dict
    ) -> ValidationResult:
        if isinstance(value, (list, tuple)) and any(not _is_blank(v) for v in value):
            return ValidationResult(field_name, True, "Has entries", "non_empty_list")
        return ValidationResult(
            field_name, False, rule.get("message", "Required"), "non_empty_list"
        )

    def _cross_validate_salary(self, fields: dict[str, Any]) -> list[ValidationResult]:
        """Salary components must add up to the monthly total.

        Skipped until a total and at least one component are entered, so
        an empty form only reports the missing fields.
        """
        total = fields.get("salary_total")
        parts = [fields.get(name) for name in _SALARY_PARTS]
        if _is_blank(total) or all(_is_blank(p) for p in parts):
            return []

        try:
            amounts = [float(p) if not _is_blank(p) else 0.0 for p in parts]
            valid, difference = validate_salary_breakdown(float(total), *amounts)
        except (TypeError, ValueError):
            return [
                ValidationResult(
                    "salary_total", False, "Invalid salary amount", "cross_field"
                )
            ]

        if valid:
            return [
                ValidationResult(
                    "salary_total", True, "Breakdown matches total", "cross_field"
                )
            ]
        return [
            ValidationResult(
                "salary_total",
                False,
                f"Salary breakdown must equal the monthly salary (off by {difference:.2f})",
                "cross_field",
            )
        ]
