import pytest

from otrust.common import validators
from otrust.common.exceptions import PreconditionError, ValidationError


def test_claim_text_bounds() -> None:
    assert validators.validate_claim_text("  abc  ") == "abc"
    assert validators.validate_claim_text("x" * 5000) == "x" * 5000

    for text in ("ab", "x" * 5001, "", None):
        with pytest.raises(ValidationError) as exc_info:
            validators.validate_claim_text(text)
        assert exc_info.value.field == "claim"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://a, https://b", ["https://a", "https://b"]),
        ("https://a,,", ["https://a"]),
        (["https://a", " "], ["https://a"]),
    ],
)
def test_parse_evidence(value, expected) -> None:
    assert validators.parse_evidence(value) == expected


@pytest.mark.parametrize("value", [None, "", " , ", []])
def test_parse_evidence_requires_one_url(value) -> None:
    with pytest.raises(ValidationError, match="At least one evidence URL"):
        validators.parse_evidence(value)


def test_choices() -> None:
    assert validators.validate_claim_type("analysis") == "analysis"
    assert validators.validate_proof_action("invalidated") == "invalidated"
    assert validators.validate_sort("credibility") == "credibility"

    with pytest.raises(ValidationError, match="Type must be one of: factual"):
        validators.validate_claim_type("Factual")
    with pytest.raises(ValidationError):
        validators.validate_proof_action("liked")
    with pytest.raises(ValidationError):
        validators.validate_sort(None)


@pytest.mark.parametrize(("value", "expected"), [("0", 0.0), (1, 1.0), ("0.25", 0.25)])
def test_confidence_accepted(value, expected) -> None:
    assert validators.validate_confidence(value) == expected


@pytest.mark.parametrize("value", ["1.5", "-0.1", "nan", "high", None])
def test_confidence_rejected(value) -> None:
    with pytest.raises(ValidationError, match="between 0.0 and 1.0"):
        validators.validate_confidence(value)


def test_positive_int() -> None:
    assert validators.validate_positive_int("3", "page") == 3
    with pytest.raises(ValidationError, match="Page must be a positive integer"):
        validators.validate_positive_int("0", "page")
    with pytest.raises(ValidationError):
        validators.validate_positive_int("two", "limit")


def test_parse_bool() -> None:
    assert validators.parse_bool(None, "verified") is None
    assert validators.parse_bool("TRUE", "verified") is True
    assert validators.parse_bool("no", "verified") is False
    with pytest.raises(ValidationError):
        validators.parse_bool("maybe", "verified")


def test_validation_error_is_precondition() -> None:
    with pytest.raises(PreconditionError) as exc_info:
        validators.validate_non_empty("  ", "subject")
    assert exc_info.value.exit_code == 3
    assert exc_info.value.message == "Subject is required"
