import pytest

from gamehub.services.placeholders import (
    PLACEHOLDER_NAME,
    clean,
    is_placeholder_email,
    is_placeholder_name,
    is_placeholder_phone,
    is_placeholder_wallet,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        ("", True),
        ("   ", True),
        (PLACEHOLDER_NAME, True),
        ("new user 42", True),
        ("Guest User", True),
        ("Alice", False),
        ("Userina", False),
    ],
)
def test_is_placeholder_name(value, expected):
    assert is_placeholder_name(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        (" ", True),
        ("0xabc@wallet.connect", True),
        ("0xABC@Wallet.Connect", True),
        ("someone@placeholder.local", True),
        ("a@x.com", False),
        ("wallet.connect@x.com", False),
    ],
)
def test_is_placeholder_email(value, expected):
    assert is_placeholder_email(value) is expected


def test_wallet_and_phone_are_placeholder_only_when_empty():
    assert is_placeholder_wallet(None)
    assert is_placeholder_wallet("  ")
    assert not is_placeholder_wallet("0xabc")
    assert is_placeholder_phone("")
    assert not is_placeholder_phone("+1555")


def test_clean():
    assert clean(None) is None
    assert clean("   ") is None
    assert clean("  Alice ") == "Alice"
