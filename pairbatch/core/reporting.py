"""Batch result formatting functions."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from pairbatch.models.batch_result import BatchResult
    from pairbatch.models.outcome import OperationOutcome


def artifact_filename(network: str, timestamp: datetime) -> str:
    """Result file name for a run, unique per network and millisecond."""
    millis = int(timestamp.timestamp() * 1000)
    return f"trading-pairs-{network}-{millis}.json"


def format_amount(value: Decimal) -> str:
    """Format a token amount with thousands separators and no trailing zeros."""
    return f"{value.normalize():,f}"


def _format_price(price: Decimal | None) -> str:
    # A drained pool reads back as 0, which is still a verified value.
    return "n/a" if price is None else format_amount(price)


def format_outcome_line(index: int, total: int, outcome: OperationOutcome) -> str:
    """One progress line for a finished item."""
    prefix = f"[{index}/{total}] {outcome.symbol}"
    if outcome.status == "succeeded":
        price = _format_price(outcome.verified_price)
        return f"{prefix}: created (attempts={outcome.attempts}, price={price} NGN)"
    if outcome.status == "skipped-duplicate":
        return f"{prefix}: skipped, pair already exists"
    step = outcome.failed_step.value if outcome.failed_step else "batch"
    return f"{prefix}: FAILED at {step} [{outcome.error_kind}] {outcome.error_message}"


def format_batch_summary(result: BatchResult, artifact_path: str | None = None) -> str:
    """Render counts, created pairs and failures as a text table."""
    lines = [
        "Trading Pair Creation Summary",
        "=" * 50,
        f"Network:          {result.network} (chain {result.chain_id})",
        f"Identity:         {result.submitting_identity}",
        f"Total processed:  {result.total_count}",
        f"Successful:       {result.success_count} ({result.skipped_count} already existed)",
        f"Failed:           {result.failure_count}",
    ]
    if artifact_path:
        lines.append(f"Results saved to: {artifact_path}")

    created = result.succeeded
    if created:
        lines.append("")
        lines.append("Created trading pairs:")
        lines.append(
            f"  {'SYMBOL':<12} {'COMPANY':<30} {'NGN LIQUIDITY':>15} {'ASSET LIQUIDITY':>16} "
            f"{'FEE':>6} {'PRICE':>12}  ADDRESS"
        )
        for outcome in created:
            price = _format_price(outcome.verified_price)
            fee = f"{Decimal(outcome.fee_rate) / 100}%"
            company = outcome.company_name[:30]
            lines.append(
                f"  {outcome.symbol:<12} {company:<30} {format_amount(outcome.quote_liquidity):>15} "
                f"{format_amount(outcome.asset_liquidity):>16} {fee:>6} {price:>12}  "
                f"{outcome.asset_address}"
            )

    failed = result.failed
    if failed:
        lines.append("")
        lines.append(f"Failed items ({len(failed)}):")
        for outcome in failed[:20]:
            step = outcome.failed_step.value if outcome.failed_step else "batch"
            lines.append(f"  - {outcome.symbol} at {step}: [{outcome.error_kind}] {outcome.error_message}")
        if len(failed) > 20:
            lines.append(f"  ... and {len(failed) - 20} more")

    return "\n".join(lines)
