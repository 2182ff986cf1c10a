"""Wallet identity normalization helpers."""

from __future__ import annotations

import re
from typing import Any

_HEX_ADDRESS = re.compile(r"0x[0-9a-fA-F]{9,}")


def normalize_identity(wallet_address: Any, identity_key: Any) -> str | None:
    """Return the lowercase identity for a stored score record.

    The ``walletAddress`` field wins when it holds a non-empty string; otherwise
    the document key is used. Case-insensitive comparison is a business rule,
    so the lowercasing happens here rather than in any store index.

    Args:
        wallet_address: Raw ``walletAddress`` value from the record.
        identity_key: Storage key the record was read from.

    Returns:
        The normalized identity, or ``None`` when neither value is usable.
    """

    for candidate in (wallet_address, identity_key):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.lower()
    return None


def display_name_for(identity: str) -> str:
    """Derive the leaderboard display name for an identity.

    Hex addresses render as ``0x1234...abcd``; anything else, including
    ``0x``-prefixed names with non-hex characters, is shown as is.
    """

    if _HEX_ADDRESS.fullmatch(identity):
        return f"{identity[:6]}...{identity[-4:]}"
    return identity


__all__ = ["normalize_identity", "display_name_for"]
