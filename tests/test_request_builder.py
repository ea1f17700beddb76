import json

import pytest

from otrust.client.application.credential_store import CredentialStore
from otrust.client.application.request_builder import (
    PAYLOAD_FIELDS,
    SignedRequestBuilder,
    canonical_json,
)
from otrust.common.crypto import CryptoUtils
from otrust.common.exceptions import MissingKeyPairError

TIMESTAMP = 1700000000000

CLAIM_FIELDS = {
    "claim": "Water boils at 100 C at sea level",
    "evidence": ["https://example.org/boiling"],
    "type": "factual",
    "semantic": {"subject": "water", "predicate": "boils_at", "object": "100C"},
}

PROOF_FIELDS = {
    "claimId": "claim-1",
    "action": "confirmed",
    "reason": "Measured it",
    "confidence": 0.75,
}


@pytest.fixture
def builder(keyed_store: CredentialStore) -> SignedRequestBuilder:
    return SignedRequestBuilder(keyed_store)


def test_login_payload_exact_string(builder, rsa_keys) -> None:
    public_pem, _ = rsa_keys
    payload = builder.build_payload("login", timestamp=TIMESTAMP)
    expected = (
        '{"action":"login","publicKey":'
        + json.dumps(public_pem)
        + f',"timestamp":{TIMESTAMP}}}'
    )
    assert payload == expected


def test_login_signature_round_trip(builder, rsa_keys) -> None:
    public_pem, private_pem = rsa_keys
    payload = builder.build_payload("login", timestamp=TIMESTAMP)
    signature = builder.sign(payload, private_pem)

    assert CryptoUtils.verify(payload, signature, public_pem)
    altered = builder.build_payload("login", timestamp=TIMESTAMP + 1)
    assert not CryptoUtils.verify(altered, signature, public_pem)


def test_sign_uses_stored_key_by_default(builder, rsa_keys) -> None:
    public_pem, _ = rsa_keys
    payload = builder.build_payload("register", timestamp=TIMESTAMP)
    assert builder.verify(payload, builder.sign(payload), public_pem)


def test_build_payload_is_deterministic(builder) -> None:
    first = builder.build_payload("claim", CLAIM_FIELDS, TIMESTAMP)
    second = builder.build_payload("claim", dict(CLAIM_FIELDS), TIMESTAMP)
    assert first == second


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("claim", "Water boils at 90 C on a mountain"),
        ("evidence", ["https://example.org/other"]),
        ("type", "opinion"),
        ("semantic", {"subject": "water", "predicate": "boils_at", "object": "90C"}),
        ("parent_id", "claim-0"),
    ],
)
def test_claim_payload_changes_with_any_field(builder, field, value) -> None:
    base = builder.build_payload("claim", CLAIM_FIELDS, TIMESTAMP)
    changed = builder.build_payload("claim", {**CLAIM_FIELDS, field: value}, TIMESTAMP)
    assert base != changed


def test_claim_payload_field_order(builder) -> None:
    fields = {
        "semantic": {"object": "100C", "subject": "water", "predicate": "boils_at"},
        "type": "factual",
        "evidence": CLAIM_FIELDS["evidence"],
        "claim": CLAIM_FIELDS["claim"],
    }
    payload = json.loads(builder.build_payload("claim", fields, TIMESTAMP))

    assert list(payload) == list(PAYLOAD_FIELDS["claim"])
    assert list(payload["semantic"]) == ["subject", "predicate", "object"]
    assert payload["parent_id"] is None
    assert payload["timestamp"] == TIMESTAMP


def test_proof_payload_field_order(builder, rsa_keys) -> None:
    payload = json.loads(builder.build_payload("proof", PROOF_FIELDS, TIMESTAMP))
    assert list(payload) == [
        "claimId",
        "action",
        "publicKey",
        "timestamp",
        "reason",
        "confidence",
    ]
    assert payload["publicKey"] == rsa_keys[0]


def test_proof_payload_omits_missing_reason(builder) -> None:
    fields = {**PROOF_FIELDS, "reason": None}
    payload = builder.build_payload("proof", fields, TIMESTAMP)
    assert '"reason"' not in payload
    assert list(json.loads(payload)) == [
        "claimId",
        "action",
        "publicKey",
        "timestamp",
        "confidence",
    ]


def test_integral_confidence_serialized_as_integer(builder) -> None:
    payload = builder.build_payload(
        "proof", {**PROOF_FIELDS, "confidence": 1.0}, TIMESTAMP
    )
    assert payload.endswith(',"confidence":1}')


@pytest.mark.parametrize(
    ("confidence", "expected"),
    [
        (0.5, "0.5"),
        (0.0001, "0.0001"),
        (0.00005, "0.00005"),
        (0.000001, "0.000001"),
        (0.0000015, "0.0000015"),
        (1e-7, "1e-7"),
        (2.5e-8, "2.5e-8"),
        (0.0, "0"),
    ],
)
def test_confidence_written_like_json_stringify(builder, confidence, expected) -> None:
    payload = builder.build_payload(
        "proof", {**PROOF_FIELDS, "confidence": confidence}, TIMESTAMP
    )
    assert payload.endswith(f',"confidence":{expected}}}')


def test_large_numbers_written_like_json_stringify() -> None:
    assert canonical_json({"a": 1e20, "b": 1e21, "c": -3.5e22}) == (
        '{"a":100000000000000000000,"b":1e+21,"c":-3.5e+22}'
    )


def test_non_finite_numbers_rejected() -> None:
    with pytest.raises(ValueError, match="not JSON compliant"):
        canonical_json({"a": float("nan")})


def test_canonical_json_is_compact_and_keeps_unicode() -> None:
    assert canonical_json({"b": "å", "a": [1.0, 2.5]}) == '{"b":"å","a":[1,2.5]}'


def test_clock_supplies_timestamp(keyed_store) -> None:
    builder = SignedRequestBuilder(keyed_store, clock=lambda: 42)
    assert json.loads(builder.build_payload("login"))["timestamp"] == 42


def test_unknown_action_rejected(builder) -> None:
    with pytest.raises(ValueError, match="Unknown payload action"):
        builder.build_payload("delete", {}, TIMESTAMP)


def test_missing_claim_field_rejected(builder) -> None:
    fields = {k: v for k, v in CLAIM_FIELDS.items() if k != "evidence"}
    with pytest.raises(ValueError, match="evidence"):
        builder.build_payload("claim", fields, TIMESTAMP)


@pytest.mark.parametrize(
    ("action", "fields"), [("claim", CLAIM_FIELDS), ("proof", PROOF_FIELDS)]
)
def test_build_without_key_pair_is_precondition_error(store, action, fields) -> None:
    builder = SignedRequestBuilder(store)
    with pytest.raises(MissingKeyPairError):
        builder.build_payload(action, fields, TIMESTAMP)
    with pytest.raises(MissingKeyPairError):
        builder.signed_request(action, fields, TIMESTAMP)


def test_sign_without_key_pair_is_precondition_error(store) -> None:
    with pytest.raises(MissingKeyPairError):
        SignedRequestBuilder(store).sign("{}")


def test_signed_auth_request_body(builder, rsa_keys) -> None:
    public_pem, _ = rsa_keys
    signed = builder.signed_request("register", timestamp=TIMESTAMP)

    assert signed.body == {
        "publicKey": public_pem,
        "signature": signed.signature,
        "timestamp": TIMESTAMP,
    }
    assert builder.verify(signed.canonical_json, signed.signature, public_pem)


def test_signed_claim_request_body(builder, rsa_keys) -> None:
    public_pem, _ = rsa_keys
    signed = builder.signed_request("claim", CLAIM_FIELDS, TIMESTAMP)

    body = dict(signed.body)
    assert body.pop("signature") == signed.signature
    assert canonical_json(body) == signed.canonical_json
    assert builder.verify(signed.canonical_json, signed.signature, public_pem)
