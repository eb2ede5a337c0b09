import pytest

from insurance_client.core.errors import RecordDecodeError
from insurance_client.core.identity import ZERO_ADDRESS
from insurance_client.core.records import (
    ClaimStatus,
    decode_claim,
    decode_policy,
    derive_claim_status,
    read_policy_reference,
)

HOLDER = "0x" + "b" * 40


def test_decode_policy_from_mapping():
    record = decode_policy({
        "id": 3,
        "holder": HOLDER,
        "premium": 10 ** 18,
        "coverage": 10 ** 19,
        "expiry": 1_800_000_000,
        "active": True,
    })
    assert record.id == 3
    assert record.holder == HOLDER
    assert record.premium == 10 ** 18
    assert record.active is True
    assert record.expiry == 1_800_000_000
    assert record.is_empty_slot is False


def test_decode_policy_from_positional_tuple():
    record = decode_policy((1, HOLDER, 5, 50, 0, False))
    assert record.id == 1
    assert record.coverage == 50
    assert record.active is False


def test_zero_holder_is_empty_slot():
    record = decode_policy((0, ZERO_ADDRESS, 0, 0, 0, False))
    assert record.is_empty_slot is True


@pytest.mark.parametrize(
    "raw",
    [
        {"id": 1, "holder": HOLDER, "premium": 1, "active": True},  # no coverage
        {"id": 1, "holder": HOLDER, "premium": "1", "coverage": 1, "active": True},
        {"id": 1, "holder": "", "premium": 1, "coverage": 1, "active": True},
        {"id": 1, "holder": HOLDER, "premium": 1, "coverage": 1, "active": 1},
        (1, HOLDER, 1),
        "not a record",
    ],
)
def test_decode_policy_fails_closed(raw):
    with pytest.raises(RecordDecodeError):
        decode_policy(raw)


def test_decode_claim_accepts_policy_id_aliases():
    for key in ("policyId", "policyID", "policy_id"):
        record = decode_claim({
            "id": 2,
            key: 7,
            "claimant": HOLDER,
            "amount": 3,
            "approved": False,
            "paid": False,
        })
        assert record.policy_id == 7


def test_decode_claim_missing_policy_reference_raises():
    with pytest.raises(RecordDecodeError):
        decode_claim({"id": 2, "claimant": HOLDER, "amount": 3, "approved": False, "paid": False})


def test_derive_claim_status():
    assert derive_claim_status(False, False) is ClaimStatus.PENDING
    assert derive_claim_status(True, False) is ClaimStatus.APPROVED
    assert derive_claim_status(True, True) is ClaimStatus.PAID
    # Paid wins even without approval.
    assert derive_claim_status(False, True) is ClaimStatus.PAID


def test_claim_record_status_property():
    record = decode_claim((4, 1, HOLDER, 10, True, False))
    assert record.status is ClaimStatus.APPROVED
    assert record.status.value == "Approved"


def test_read_policy_reference_is_best_effort():
    assert read_policy_reference({"policyId": 9}) == 9
    assert read_policy_reference((0, 4, HOLDER, 1, False, False)) == 4
    assert read_policy_reference({"claimant": HOLDER}) is None
    assert read_policy_reference(None) is None
