"""Property-based tests for validators using hypothesis."""

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.app.core.exceptions import ValidationError
from src.app.core.security import (
    PasswordStrength,
    require_valid_password,
    sanitize_free_text,
    validate_email_format,
    validate_handle_format,
    validate_password_strength,
)
from src.app.core.security.validators import MAX_FREE_TEXT_LENGTH, PASSWORD_SYMBOLS

pytestmark = pytest.mark.unit


# One of each required class plus filler, shuffled
valid_password = st.tuples(
    st.sampled_from(string.ascii_uppercase),
    st.sampled_from(string.ascii_lowercase),
    st.sampled_from(string.digits),
    st.sampled_from(PASSWORD_SYMBOLS),
    st.text(alphabet=string.ascii_letters + string.digits, min_size=4, max_size=40),
).flatmap(lambda parts: st.permutations(list("".join(parts)))).map("".join)

valid_handle = st.from_regex(r"[a-zA-Z0-9_]{3,30}", fullmatch=True)


@given(password=valid_password)
@settings(max_examples=100)
def test_passwords_meeting_every_rule_are_accepted(password: str):
    """Passwords with all character classes and enough length pass."""
    check = validate_password_strength(password)

    assert check.is_valid
    assert check.errors == []
    assert check.strength in (PasswordStrength.MEDIUM, PasswordStrength.STRONG)
    require_valid_password(password)


@given(password=st.text(alphabet=string.ascii_letters + PASSWORD_SYMBOLS, max_size=40))
def test_passwords_without_digits_are_rejected(password: str):
    check = validate_password_strength(password)

    assert not check.is_valid
    assert "Password must contain at least one number" in check.errors


@given(password=st.text(alphabet=string.printable, max_size=7))
def test_short_passwords_are_rejected(password: str):
    """Anything under 8 characters fails regardless of composition."""
    with pytest.raises(ValidationError) as exc_info:
        require_valid_password(password)

    assert exc_info.value.code == "WeakPassword"
    assert "Password must be at least 8 characters long" in exc_info.value.details["errors"]


@given(password=valid_password.filter(lambda p: len(p) >= 12))
def test_long_complete_passwords_are_strong(password: str):
    assert validate_password_strength(password).strength == PasswordStrength.STRONG


def test_password_error_list_names_every_missing_rule():
    check = validate_password_strength("abc")

    assert check.strength == PasswordStrength.WEAK
    assert len(check.errors) == 4


@given(handle=valid_handle)
@settings(max_examples=100)
def test_valid_handles_accepted(handle: str):
    assert validate_handle_format(handle) == []


@given(handle=st.text(alphabet=string.ascii_letters, min_size=31, max_size=60))
def test_long_handles_rejected(handle: str):
    assert "Username must be less than 30 characters" in validate_handle_format(handle)


@given(
    handle=st.from_regex(r"[a-z]{2,10}[-. @!][a-z]{2,10}", fullmatch=True),
)
def test_handles_with_punctuation_rejected(handle: str):
    assert (
        "Username can only contain letters, numbers, and underscores"
        in validate_handle_format(handle)
    )


@given(value=st.text(max_size=2000))
def test_sanitized_text_has_no_angle_brackets(value: str):
    """Sanitizing always removes markup brackets and caps the length."""
    cleaned = sanitize_free_text(value)

    assert "<" not in cleaned
    assert ">" not in cleaned
    assert len(cleaned) <= MAX_FREE_TEXT_LENGTH


@given(value=st.text(alphabet=string.ascii_letters + " ", max_size=500))
def test_sanitize_only_trims_plain_text(value: str):
    assert sanitize_free_text(value) == value.strip()


def test_sanitize_empty_values():
    assert sanitize_free_text(None) == ""
    assert sanitize_free_text("") == ""


def test_sanitize_strips_script_tags():
    assert sanitize_free_text("  <script>alert(1)</script> ") == "scriptalert(1)/script"


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("user@example.com", True),
        ("first.last+tag@sub.example.co", True),
        ("no-at-sign.example.com", False),
        ("user@nodot", False),
        ("user name@example.com", False),
        ("", False),
    ],
)
def test_email_format(email: str, expected: bool):
    assert validate_email_format(email) is expected
