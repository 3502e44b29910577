import pytest

from maps_leads.core import phone
from maps_leads.core.phone import PhoneValidator
from maps_leads.models import NO_PHONE


def test_validate_formats_e164():
    validator = PhoneValidator("US")
    assert validator.validate("(201) 555-0123") == "+12015550123"
    assert validator.validate("+1 201-555-0123") == "+12015550123"


def test_region_hint_is_used_for_national_numbers():
    validator = PhoneValidator("GB")
    assert validator.validate("201-555-0123", region_hint="US") == "+12015550123"


@pytest.mark.parametrize("raw", [None, "", "   ", "not a phone", "123", NO_PHONE])
def test_unusable_input_returns_sentinel(raw):
    assert PhoneValidator().validate(raw) == NO_PHONE


def test_parse_exception_is_logged_not_raised(caplog):
    with caplog.at_level("WARNING"):
        result = PhoneValidator().validate("call us")

    assert result == NO_PHONE
    assert "Unable to parse phone" in " ".join(caplog.messages)


def test_unexpected_parser_fault_collapses_to_sentinel(monkeypatch):
    def broken_parse(raw, region):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(phone.phonenumbers, "parse", broken_parse)
    assert PhoneValidator().validate("+1 201-555-0123") == NO_PHONE


def test_is_valid():
    assert PhoneValidator.is_valid("+12015550123") is True
    assert PhoneValidator.is_valid(NO_PHONE) is False
    assert PhoneValidator.is_valid(None) is False
