"""
Placeholder policy for user fields.

A placeholder is a value the system assigned because the user had not
supplied one yet. Placeholders may be promoted (overwritten) by a real
value from a later login; real values never are.
"""
from typing import Optional

PLACEHOLDER_NAME = "New User"

# Names containing any of these were assigned by a client or an older
# release of the login flow, never typed by a player.
PLACEHOLDER_NAME_MARKERS = (PLACEHOLDER_NAME, "Guest User")

# Synthetic addresses wallet-only clients submit in place of a real email.
PLACEHOLDER_EMAIL_DOMAINS = ("@wallet.connect", "@placeholder.local")


def clean(value: Optional[str]) -> Optional[str]:
    """Trim ``value``; empty strings become ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_placeholder_name(value: Optional[str]) -> bool:
    value = clean(value)
    if value is None:
        return True
    return any(marker.lower() in value.lower() for marker in PLACEHOLDER_NAME_MARKERS)


def is_placeholder_email(value: Optional[str]) -> bool:
    value = clean(value)
    if value is None:
        return True
    return value.lower().endswith(PLACEHOLDER_EMAIL_DOMAINS)


def is_placeholder_wallet(value: Optional[str]) -> bool:
    return clean(value) is None


def is_placeholder_phone(value: Optional[str]) -> bool:
    return clean(value) is None
