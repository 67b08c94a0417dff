"""
Field validators shared by tagging rules.

Placeholder and test values are rejected so synthetic records are not
tagged as genuine PII/PHI.
"""
from typing import Optional

PLACEHOLDER_VALUES = frozenset({
    "a@a.com",
    "test@test.com",
    "dummy@dummy.com",
    "example@example.com",
    "noemail",
    "no-email",
    "n/a",
    "na",
    "none",
    "null",
    "unknown",
    "0000000000",  # placeholder phone/NPI
    "1111111111",
    "9999999999",
})

PLACEHOLDER_FRAGMENTS = ("test", "dummy", "placeholder")


def digits_only(value: Optional[str]) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())


def is_valid_value(value: Optional[str]) -> bool:
    """True for non-empty values that are not known placeholders or test data"""
    if value is None or not value.strip():
        return False

    normalized = value.strip().lower()
    if normalized in PLACEHOLDER_VALUES:
        return False
    return not any(fragment in normalized for fragment in PLACEHOLDER_FRAGMENTS)


def is_valid_email(email: Optional[str]) -> bool:
    if not is_valid_value(email):
        return False
    return "@" in email and "." in email and len(email) >= 5


def is_valid_phone(phone: Optional[str]) -> bool:
    if not is_valid_value(phone):
        return False
    return 10 <= len(digits_only(phone)) <= 15


def is_valid_npi(npi: Optional[str]) -> bool:
    if not is_valid_value(npi):
        return False
    digits = digits_only(npi)
    return len(digits) == 10 and digits != "0000000000"
