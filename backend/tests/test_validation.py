import pytest

from storefront.validation import MAX_INTEGER, PayloadPolicy, ValidationError, coerce_int, validate_payload


POLICY = PayloadPolicy(
    fields={"quantity", "warehouse_id"},
    required={"quantity"},
    nullable={"warehouse_id"},
)


@pytest.mark.parametrize("value, expected", [(3, 3), ("42", 42), (" -7 ", -7), (MAX_INTEGER, MAX_INTEGER)])
def test_coerce_int_accepts_integers(value, expected):
    assert coerce_int("quantity", value) == expected


@pytest.mark.parametrize(
    "value",
    [True, 1.0, "1.5", "1e3", "", "abc", None, [1], MAX_INTEGER + 1, 10**20, str(10**20)],
)
def test_coerce_int_rejects_everything_else(value):
    with pytest.raises(ValidationError):
        coerce_int("quantity", value)


def test_validate_payload_coerces_fields():
    cleaned = validate_payload(payload={"quantity": "2", "warehouse_id": None}, policy=POLICY)

    assert cleaned == {"quantity": 2, "warehouse_id": None}


@pytest.mark.parametrize(
    "payload, message",
    [
        ({}, "Missing required fields: quantity"),
        ([1, 2], "Invalid JSON payload"),
        ({"quantity": 1, "colour": "red"}, "Field not allowed: colour"),
        ({"quantity": None}, "quantity cannot be null"),
        ({"quantity": 1, "warehouse_id": "two"}, "warehouse_id must be an integer"),
        ({"quantity": 10**20}, "quantity is out of range"),
    ],
)
def test_validate_payload_rejections(payload, message):
    with pytest.raises(ValidationError, match=message):
        validate_payload(payload=payload, policy=POLICY)
