"""Identifier-to-seed derivation for avatar rendering.

Architectural role:
    First stage of the render pipeline. Converts the request identifier (and
    optional auxiliary data) into the integer seed that drives every pattern
    decision in `tile_avatar.render.pattern` through `SeededRandom`.

Derivation:
    1. Join as `"{identifier}-{aux}"` when `aux` is a non-empty string,
       otherwise use `identifier` alone.
    2. SHA-256 over the UTF-8 bytes, rendered as hex.
    3. First 8 hex characters parsed base-16.

Determinism:
    Pure function of its arguments. No process state, salt, or environment is
    consulted, so the same input yields the same seed on every host.

Security considerations:
    The hash only spreads inputs over the seed space for visual variety. The
    truncated 32-bit value offers no tamper resistance.
"""

import hashlib

SEED_HEX_CHARS = 8


def seed_input(identifier: str, aux: str | None = None) -> str:
    """Return the exact string that is hashed for `identifier`/`aux`."""
    if aux:
        return f"{identifier}-{aux}"
    return identifier


def derive_seed(identifier: str, aux: str | None = None) -> int:
    """Derive the 32-bit render seed for an identifier.

    Args:
        identifier: Address-like request identifier. Treated as opaque text.
        aux: Optional auxiliary data. Empty strings count as absent.

    Returns:
        Integer in `[0, 0xFFFFFFFF]`.

    Raises:
        ValueError: If `identifier` is empty.
    """
    if not identifier:
        raise ValueError("identifier must be a non-empty string")

    digest = hashlib.sha256(seed_input(identifier, aux).encode("utf-8")).hexdigest()
    return int(digest[:SEED_HEX_CHARS], 16)
