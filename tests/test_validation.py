import pytest

from insurance_client.core.errors import InvalidInput
from insurance_client.core.identity import ZERO_ADDRESS, Identity, addresses_equal, shorten_address
from insurance_client.core.validation import (
    parse_address,
    parse_positive_int,
    parse_record_id,
    require_fields,
)


def test_require_fields_names_first_blank_field():
    with pytest.raises(InvalidInput) as exc_info:
        require_fields({"holder": "0xabc", "premium": "  ", "coverage": ""})
    assert exc_info.value.field == "premium"
    assert str(exc_info.value) == "Please fill all fields."


def test_require_fields_accepts_numbers():
    require_fields({"duration": 30, "claim_id": 0})


@pytest.mark.parametrize("value,expected", [("0", 0), ("12", 12), (5, 5), (" 7 ", 7)])
def test_parse_record_id(value, expected):
    assert parse_record_id(value, "claim_id") == expected


@pytest.mark.parametrize("value", ["-1", "1.5", "abc", "", "٣"])
def test_parse_record_id_rejects(value):
    with pytest.raises(InvalidInput):
        parse_record_id(value, "claim_id")


def test_parse_positive_int_rejects_zero():
    with pytest.raises(InvalidInput) as exc_info:
        parse_positive_int("0", "duration")
    assert exc_info.value.field == "duration"


def test_parse_address_returns_checksum_form():
    address = "0x" + "ab" * 20
    parsed = parse_address(address, "holder")
    assert parsed.lower() == address
    assert parsed.startswith("0x")


@pytest.mark.parametrize("value", ["0x123", "not-an-address", ZERO_ADDRESS])
def test_parse_address_rejects(value):
    with pytest.raises(InvalidInput):
        parse_address(value, "holder")


def test_addresses_compare_case_insensitively():
    assert addresses_equal("0x" + "AB" * 20, "0x" + "ab" * 20)
    assert not addresses_equal(None, "0x" + "ab" * 20)
    assert Identity("0x" + "AB" * 20).matches("0x" + "ab" * 20)


def test_shorten_address():
    assert shorten_address("0x1234567890abcdef1234567890abcdef1234abcd") == "0x1234...abcd"
    assert shorten_address("0x12") == "0x12"
