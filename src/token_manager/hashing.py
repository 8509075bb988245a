"""Hash-derived priorities for candidate indices.

The priority of an index is the first 8 bytes of
``SHA-256(f"{name} {nonce}")`` read as an unsigned big-endian integer.
Any client holding the token name can recompute it, so the derivation is
part of the external contract and must stay bit-exact.
"""

from __future__ import annotations

import hashlib

MAX_PRIORITY: int = 2**64 - 1
"""Largest possible priority; used as the "no candidate" sentinel."""


def priority_message(name: str, nonce: int) -> bytes:
    """Build the byte string that is fed to the digest.

    Args:
        name: Token name used as the hash-domain salt. May be empty.
        nonce: Candidate index. Rendered in base 10 without padding.

    Returns:
        ``name``, one space, then the decimal nonce, UTF-8 encoded.
    """
    return f"{name} {nonce:d}".encode("utf-8")


def priority(name: str, nonce: int) -> int:
    """Return the 64-bit pseudo-random priority of *nonce* under *name*.

    Args:
        name: Token name.
        nonce: Candidate index (unsigned 64-bit).

    Returns:
        Integer in ``[0, MAX_PRIORITY]``. Lower is better.
    """
    digest = hashlib.sha256(priority_message(name, nonce)).digest()
    return int.from_bytes(digest[:8], "big")
