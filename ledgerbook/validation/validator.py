"""
Entry Validation

Checks user input before anything is created or written. Each check
returns a list of ValidationIssue; an empty list means the input is
acceptable. Nothing here mutates state or raises for bad input.

IMPORTANT: Validation never silently fixes issues (beyond trimming
whitespace). It reports them for the caller to show.
"""

import math
from typing import Any, Iterable, Optional

from ledgerbook.models.inventory import Product
from ledgerbook.models.ledger import Debtor, DebtorType, Polarity
from ledgerbook.models.validation import ValidationIssue


MAX_NOTE_LENGTH = 1000
MAX_NAME_LENGTH = 200
MAX_PHONE_LENGTH = 50
MAX_BARCODE_LENGTH = 64


def _as_number(value: Any) -> Optional[float]:
    """A finite float, or None for anything else (bools included)."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


class EntryValidator:
    """Validates debtor, transaction and product input."""

    def validate_transaction(
        self,
        debtor: Optional[Debtor],
        polarity: Any,
        amount: Any,
        note: Any,
    ) -> list[ValidationIssue]:
        """
        Validate a new ledger entry.

        Checks:
        - The debtor exists
        - The polarity is debt or payment
        - The amount is a finite number greater than zero
        - The note is non-empty after trimming
        """
        issues = []

        if debtor is None:
            issues.append(ValidationIssue(
                field="debtor_id",
                issue_type="not_found",
                message="Debtor not found",
                suggested_fix="Pick an existing customer or supplier",
            ))

        if self.parse_polarity(polarity) is None:
            issues.append(ValidationIssue(
                field="polarity",
                issue_type="invalid_value",
                message=f"Transaction type must be 'debt' or 'payment', got {polarity!r}",
            ))

        number = _as_number(amount)
        if number is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a number",
            ))
        elif number <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                suggested_fix="Enter the amount without a sign",
            ))

        text = note.strip() if isinstance(note, str) else ""
        if not text:
            issues.append(ValidationIssue(
                field="note",
                issue_type="missing",
                message="A note describing the transaction is required",
            ))
        elif len(text) > MAX_NOTE_LENGTH:
            issues.append(ValidationIssue(
                field="note",
                issue_type="too_long",
                message=f"Note is longer than {MAX_NOTE_LENGTH} characters",
            ))

        return issues

    def validate_debtor(
        self,
        name: Any,
        debtor_type: Any,
        phone: Optional[str],
        existing: Iterable[Debtor],
        match_phone: bool = False,
    ) -> list[ValidationIssue]:
        """
        Validate a new debtor.

        Names must be unique (case-insensitive). For contact imports
        (``match_phone``) a matching phone number also counts as a
        duplicate.
        """
        issues = []
        trimmed = name.strip() if isinstance(name, str) else ""
        trimmed_phone = phone.strip() if isinstance(phone, str) else ""

        if not trimmed:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Debtor name is required",
            ))
        elif len(trimmed) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Debtor name is longer than {MAX_NAME_LENGTH} characters",
            ))

        if self.parse_debtor_type(debtor_type) is None:
            issues.append(ValidationIssue(
                field="debtor_type",
                issue_type="invalid_value",
                message=f"Debtor type must be 'customer' or 'supplier', got {debtor_type!r}",
            ))

        if len(trimmed_phone) > MAX_PHONE_LENGTH:
            issues.append(ValidationIssue(
                field="phone",
                issue_type="too_long",
                message=f"Phone number is longer than {MAX_PHONE_LENGTH} characters",
            ))

        lowered = trimmed.lower()
        for other in existing:
            if trimmed and other.name.lower() == lowered:
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="duplicate",
                    message=f"A debtor named {other.name} already exists",
                ))
                break
            if match_phone and trimmed_phone and other.phone == trimmed_phone:
                issues.append(ValidationIssue(
                    field="phone",
                    issue_type="duplicate",
                    message=f"{other.name} already uses phone {trimmed_phone}",
                ))
                break

        return issues

    def validate_product(
        self,
        barcode: Any,
        name: Any,
        quantity: Any,
        price: Any,
        existing: Iterable[Product],
        product_id: Optional[str] = None,
    ) -> list[ValidationIssue]:
        """
        Validate product fields for an add (``product_id`` None) or an edit.

        The barcode must be unique among the other products.
        """
        issues = []
        trimmed_barcode = barcode.strip() if isinstance(barcode, str) else ""

        trimmed_name = name.strip() if isinstance(name, str) else ""

        if not trimmed_barcode:
            issues.append(ValidationIssue(
                field="barcode",
                issue_type="missing",
                message="Barcode is required",
            ))
        elif len(trimmed_barcode) > MAX_BARCODE_LENGTH:
            issues.append(ValidationIssue(
                field="barcode",
                issue_type="too_long",
                message=f"Barcode is longer than {MAX_BARCODE_LENGTH} characters",
            ))

        if not trimmed_name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Product name is required",
            ))
        elif len(trimmed_name) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Product name is longer than {MAX_NAME_LENGTH} characters",
            ))

        for field_name, value in (("quantity", quantity), ("price", price)):
            number = _as_number(value)
            if number is None or number < 0:
                issues.append(ValidationIssue(
                    field=field_name,
                    issue_type="invalid_value",
                    message=f"{field_name.capitalize()} must be a number of zero or more",
                ))

        if trimmed_barcode and any(
            p.barcode == trimmed_barcode and p.id != product_id for p in existing
        ):
            issues.append(ValidationIssue(
                field="barcode",
                issue_type="duplicate",
                message=f"Barcode {trimmed_barcode} is already used by another product",
            ))

        return issues

    @staticmethod
    def parse_polarity(value: Any) -> Optional[Polarity]:
        try:
            return Polarity(value)
        except ValueError:
            return None

    @staticmethod
    def parse_debtor_type(value: Any) -> Optional[DebtorType]:
        try:
            return DebtorType(value)
        except ValueError:
            return None

    @staticmethod
    def as_number(value: Any) -> Optional[float]:
        return _as_number(value)

    def get_user_friendly_summary(self, issues: list[ValidationIssue]) -> str:
        """One line per issue, for showing to the user."""
        if not issues:
            return "All checks passed."
        lines = ["Please fix the following:"]
        for issue in issues:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     {issue.suggested_fix}")
        return "\n".join(lines)
