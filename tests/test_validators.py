"""
Unit tests for rule field validators
"""
import pytest

from record_tagging.tagging.rules.validators import (
    digits_only,
    is_valid_email,
    is_valid_npi,
    is_valid_phone,
    is_valid_value,
)


class TestValidators:
    """Test cases for placeholder-aware field validation"""

    @pytest.mark.parametrize("value", [None, "", "   ", "N/A", "null", "Unknown", "test user", "Dummy", "placeholder"])
    def test_invalid_values(self, value):
        assert not is_valid_value(value)

    def test_valid_value(self):
        assert is_valid_value("Maria")

    @pytest.mark.parametrize("email", ["a@a.com", "test@test.com", "noemail", "a@b", "x@y."])
    def test_invalid_emails(self, email):
        assert not is_valid_email(email)

    def test_valid_email(self):
        assert is_valid_email("jane.doe@doctoralliance.com")

    def test_phone_digit_count(self):
        assert is_valid_phone("(555) 201-4477")
        assert is_valid_phone("+1 555 201 4477")
        assert not is_valid_phone("555-0199")
        assert not is_valid_phone("0000000000")

    def test_npi(self):
        assert is_valid_npi("1234567893")
        assert not is_valid_npi("0000000000")
        assert not is_valid_npi("12345")
        assert not is_valid_npi(None)

    def test_digits_only(self):
        assert digits_only("(555) 201-4477") == "5552014477"
        assert digits_only(None) == ""
