"""
User Input Validation

Raw input from dialogs (an amount typed into an "Edit Amount" prompt, a
day picked for the month start, a currency chosen from a list) is parsed
here before it reaches the stores.

IMPORTANT: Validation NEVER silently fixes issues. Every rejected value
comes back with ValidationIssues explaining why, and the caller must not
apply the change.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from paytrack.models.base import to_decimal
from paytrack.models.preferences import Language
from paytrack.models.validation import InputResult, ValidationIssue


CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
MAX_AMOUNT = Decimal("1000000000")


class InputValidator:
    """Parses raw user input into values the core accepts."""

    def __init__(self, max_amount: Decimal = MAX_AMOUNT):
        self._max_amount = max_amount

    @staticmethod
    def _missing(field: str, label: str) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="missing",
            message=f"{label} is required",
        )

    def _parse_decimal(self, raw: Any, field: str, label: str) -> InputResult:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return InputResult(issues=[self._missing(field, label)])
        if isinstance(raw, bool):
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a number",
            )])

        try:
            if isinstance(raw, str):
                value = Decimal(raw.strip().replace(",", "."))
            else:
                value = to_decimal(raw)
        except (InvalidOperation, TypeError, ValueError):
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a number",
            )])

        if not value.is_finite():
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a finite number",
            )])

        if abs(value) > self._max_amount:
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{label} is unreasonably large",
            )])

        return InputResult(value=value)

    def parse_amount(self, raw: Any, field: str = "amount") -> InputResult:
        """A payment amount: a number greater than zero."""
        result = self._parse_decimal(raw, field, "Amount")
        if result.is_valid and result.value <= 0:
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message="Amount must be greater than zero",
            )])
        return result

    def parse_balance(self, raw: Any, field: str = "current_account_balance") -> InputResult:
        """An account balance: any number, negative included."""
        return self._parse_decimal(raw, field, "Balance")

    def parse_month_start_day(self, raw: Any) -> InputResult:
        """A month start day between 1 and 31."""
        field = "month_start_day"
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return InputResult(issues=[self._missing(field, "Month start day")])

        try:
            if isinstance(raw, bool):
                raise ValueError(raw)
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError(raw)
            day = int(raw.strip()) if isinstance(raw, str) else int(raw)
        except (TypeError, ValueError):
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message="Month start day must be a whole number",
            )])

        if not 1 <= day <= 31:
            return InputResult(issues=[ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message="Month start day must be between 1 and 31",
            )])
        return InputResult(value=day)

    def parse_currency(self, code: Optional[str], symbol: Optional[str]) -> InputResult:
        """A currency code and symbol; value is a (code, symbol) tuple."""
        issues = []
        code = (code or "").strip().upper()
        symbol = (symbol or "").strip()

        if not code:
            issues.append(self._missing("currency", "Currency code"))
        elif not CURRENCY_CODE_PATTERN.match(code):
            issues.append(ValidationIssue(
                field="currency",
                issue_type="invalid_format",
                message="Currency code must be three letters (e.g. EUR)",
            ))
        if not symbol:
            issues.append(self._missing("currency_symbol", "Currency symbol"))

        if issues:
            return InputResult(issues=issues)
        return InputResult(value=(code, symbol))

    def parse_language(self, raw: Any) -> InputResult:
        """One of the supported interface languages."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return InputResult(issues=[self._missing("language", "Language")])
        try:
            value = raw if isinstance(raw, Language) else Language(str(raw).strip().lower())
        except ValueError:
            supported = ", ".join(lang.value for lang in Language)
            return InputResult(issues=[ValidationIssue(
                field="language",
                issue_type="unsupported",
                message=f"Language must be one of: {supported}",
            )])
        return InputResult(value=value)
