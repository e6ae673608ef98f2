"""Fee arithmetic for buffered gas pricing."""

from __future__ import annotations

GWEI = 10**9


def resolve_base_fee(snapshot: int | None, floor: int) -> int:
    """Use the snapshot when it is positive, otherwise fall back to ``floor``."""
    if snapshot is None or snapshot <= 0:
        return floor
    return snapshot


def apply_fee_buffer(base_fee: int, buffer_percent: int) -> int:
    """Raise ``base_fee`` by ``buffer_percent`` using integer arithmetic.

    >>> apply_fee_buffer(2, 50)
    3
    """
    if base_fee < 0:
        msg = "base_fee must not be negative"
        raise ValueError(msg)
    if buffer_percent < 0:
        msg = "buffer_percent must not be negative"
        raise ValueError(msg)
    return base_fee * (100 + buffer_percent) // 100


def format_gwei(wei: int) -> str:
    """Render a wei amount in gwei with up to two decimals."""
    return f"{wei / GWEI:.2f}".rstrip("0").rstrip(".")
