import pytest

from hostinit.services.validation import (
    REASON_BAD_BOUNDARY,
    REASON_BAD_CHARACTER,
    REASON_EMPTY,
    REASON_TOO_LONG,
    hostname_rejection_reason,
    password_policy_failures,
    validate_hostname,
    validate_password_strength,
)


@pytest.mark.parametrize("candidate", ["prod-db-01", "a", "A1", "web01", "x" * 63])
def test_validate_hostname_accepts_rfc1123_labels(candidate):
    assert validate_hostname(candidate) is True
    assert hostname_rejection_reason(candidate) is None


@pytest.mark.parametrize(
    "candidate,reason",
    [
        ("", REASON_EMPTY),
        ("x" * 64, REASON_TOO_LONG),
        ("web_01", REASON_BAD_CHARACTER),
        ("web.example.com", REASON_BAD_CHARACTER),
        ("host name", REASON_BAD_CHARACTER),
        ("-web01", REASON_BAD_BOUNDARY),
        ("web01-", REASON_BAD_BOUNDARY),
        ("-", REASON_BAD_BOUNDARY),
    ],
)
def test_validate_hostname_rejects_with_reason(candidate, reason):
    assert validate_hostname(candidate) is False
    assert hostname_rejection_reason(candidate) == reason


def test_validate_hostname_rejects_trailing_newline():
    assert validate_hostname("web01\n") is False


def test_password_policy_accepts_strong_password():
    assert password_policy_failures("Secure@Pass123") == []
    assert validate_password_strength("Secure@Pass123") is True


@pytest.mark.parametrize(
    "candidate,expected",
    [
        ("Short@1a", "too short"),
        ("secure@pass123", "uppercase"),
        ("SECURE@PASS123", "lowercase"),
        ("Secure@Password", "number"),
        ("SecurePass1234", "special"),
    ],
)
def test_password_policy_names_each_missing_class(candidate, expected):
    failures = password_policy_failures(candidate)

    assert len(failures) == 1
    assert expected in failures[0]
    assert validate_password_strength(candidate) is False


def test_password_policy_counts_characters_not_bytes():
    # eleven characters, more than twelve bytes
    assert "too short" in password_policy_failures("Ünïcödé@12A")[0]


def test_password_policy_respects_custom_minimum():
    assert validate_password_strength("Ab1@efgh", min_length=8) is True
    assert validate_password_strength("Ab1@efgh", min_length=9) is False


def test_password_policy_reports_every_failure_for_empty_input():
    assert len(password_policy_failures("")) == 5
