"""Identity utilities.

- new_object_id: 24-char hex document IDs
- generate_payment_code: short codes payers echo back in mobile payments
- normalize_person_name: accent-free uppercase names for payer matching
"""

import re
import secrets
import unicodedata

OBJECT_ID_PATTERN = re.compile(r"^[a-f0-9]{24}$")

# No 0/O or 1/I, payers type these by hand
PAYMENT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def new_object_id() -> str:
    """Generate a new document ID.

    Returns:
        24-character lowercase hex string.
    """
    return secrets.token_hex(12)


def is_object_id(value: str) -> bool:
    """Check whether a string is a well-formed document ID."""
    return bool(OBJECT_ID_PATTERN.match(value))


def generate_payment_code(length: int = 6) -> str:
    """Generate a random uppercase alphanumeric payment code.

    Args:
        length: Number of characters (must be positive).

    Returns:
        Random code drawn from PAYMENT_CODE_ALPHABET.

    Raises:
        ValueError: If length is not positive.
    """
    if length <= 0:
        raise ValueError(f"Payment code length must be positive, got {length}")
    return "".join(secrets.choice(PAYMENT_CODE_ALPHABET) for _ in range(length))


def normalize_person_name(name: str) -> str:
    """Normalize a person name for matching.

    Strips diacritics, uppercases and collapses whitespace:
    "  José   Pérez " -> "JOSE PEREZ".
    """
    decomposed = unicodedata.normalize("NFD", name)
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return " ".join(stripped.upper().split())
