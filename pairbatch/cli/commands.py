"""CLI command implementations for batch trading pair creation."""

from __future__ import annotations

import json
import signal
import sys
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError

from pairbatch.core.errors import LedgerError, SetupError
from pairbatch.core.fees import format_gwei
from pairbatch.core.reporting import format_amount, format_outcome_line
from pairbatch.models.config import Config
from pairbatch.models.fee_settings import OperationClass
from pairbatch.repositories.deployment_repository import DeploymentRepository
from pairbatch.repositories.work_item_repository import WorkItemRepository
from pairbatch.utils.logger import configure_logging

if TYPE_CHECKING:
    from pairbatch.models.deployment import Deployment
    from pairbatch.models.outcome import OperationOutcome
    from pairbatch.models.work_item import WorkItem
    from pairbatch.services.fee_estimator import FeeEstimator
    from pairbatch.services.protocols import LedgerClientProtocol


def _get_config(**overrides: Any) -> Config:
    """Load configuration from the environment and .env, applying CLI overrides."""
    try:
        return Config(**{key: value for key, value in overrides.items() if value is not None})
    except ValidationError as exc:
        click.echo(f"[ERROR] Invalid configuration: {exc}", err=True)
        sys.exit(1)


def _build_ledger(config: Config, deployment: Deployment) -> tuple[LedgerClientProtocol, str]:
    """Connect to the ledger and return the client with its submitting identity."""
    if not config.rpc_url:
        msg = "PAIRBATCH_RPC_URL is not set"
        raise SetupError(msg)
    if config.private_key is None:
        msg = "PAIRBATCH_PRIVATE_KEY is not set"
        raise SetupError(msg)

    from pairbatch.services.web3_ledger_client import Web3LedgerClient

    client = Web3LedgerClient(
        rpc_url=config.rpc_url,
        private_key=config.private_key.get_secret_value(),
        quote_token_address=deployment.contracts.ngn_stablecoin,
        dex_address=deployment.contracts.stock_ngn_dex,
        chain_id=deployment.chain_id,
        request_timeout=config.request_timeout_seconds,
    )
    try:
        client.connect()
    except LedgerError as exc:
        msg = f"Ledger unreachable at {config.rpc_url}: {exc}"
        raise SetupError(msg) from exc
    return client, client.identity


def _fail_setup(exc: SetupError) -> None:
    click.echo(f"[ERROR] {exc}", err=True)
    sys.exit(1)


@click.command()
@click.option("--network", default=None, help="Network name (defaults to PAIRBATCH_NETWORK)")
@click.option("--max-retries", default=None, type=int, help="Attempts per step")
@click.option("--dry-run", is_flag=True, help="Show items and fees without submitting")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def create_pairs(
    network: str | None, max_retries: int | None, dry_run: bool, output_format: str
) -> None:
    """Create trading pairs for every configured work item."""
    config = _get_config(network=network, max_retries=max_retries)
    configure_logging(config.log_level)

    from pairbatch.services.batch_orchestrator import BatchOrchestrator
    from pairbatch.services.fee_estimator import FeeEstimator
    from pairbatch.services.preflight import Preflight
    from pairbatch.services.result_reporter import ResultReporter
    from pairbatch.services.retry_executor import RetryExecutor
    from pairbatch.utils.cancellation import CancellationToken

    try:
        deployment = DeploymentRepository(config.deployments_dir).load(config.network)
        items = WorkItemRepository(config.work_items_path).load(config.network)
        if not items:
            click.echo(f"[WARN] No work items configured for network: {config.network}")
            return

        ledger, identity = _build_ledger(config, deployment)
        fees = FeeEstimator.from_config(ledger, config)

        if dry_run:
            try:
                _print_dry_run(items, fees)
            except LedgerError as exc:
                msg = f"Could not read fee snapshot: {exc}"
                raise SetupError(msg) from exc
            return

        Preflight(
            ledger,
            fees,
            RetryExecutor.from_config(config),
            auto_mint=config.auto_mint_quote,
            mint_amount=Decimal(config.quote_mint_amount),
            confirmation_timeout=config.confirmation_timeout_seconds,
        ).run(identity)
    except SetupError as exc:
        _fail_setup(exc)
        return

    click.echo(f"[INFO] Creating {len(items)} trading pairs on {deployment.network}...")

    token = CancellationToken(timeout=config.batch_timeout_seconds)
    previous_handler = signal.signal(
        signal.SIGINT, lambda signum, frame: token.cancel("interrupted")
    )

    def echo_outcome(index: int, total: int, outcome: OperationOutcome) -> None:
        click.echo(format_outcome_line(index, total, outcome))

    orchestrator = BatchOrchestrator.from_config(ledger, config, on_outcome=echo_outcome)
    try:
        result = orchestrator.run(
            items,
            identity,
            network=deployment.network,
            chain_id=deployment.chain_id,
            contracts=deployment.contract_map(),
            token=token,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    reporter = ResultReporter(config.results_dir)
    path = reporter.persist(result)

    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    else:
        click.echo("")
        click.echo(reporter.render(result, path))


def _print_dry_run(items: list[WorkItem], fees: FeeEstimator) -> None:
    approval = fees.estimate(OperationClass.APPROVAL)
    creation = fees.estimate(OperationClass.CREATION)
    click.echo(f"[DRY RUN] {len(items)} trading pairs would be created")
    click.echo(
        f"  approval: {format_gwei(approval.gas_price)} gwei x {approval.gas_limit} gas"
    )
    click.echo(
        f"  creation: {format_gwei(creation.gas_price)} gwei x {creation.gas_limit} gas"
    )
    for item in items:
        click.echo(
            f"  {item.symbol}: {format_amount(item.quote_liquidity)} NGN / "
            f"{format_amount(item.asset_liquidity)} {item.symbol}, fee {item.fee_percent}%"
        )


@click.command()
@click.option("--network", default=None, help="Network name (defaults to PAIRBATCH_NETWORK)")
def check_pending(network: str | None) -> None:
    """Warn when the submitting identity has unconfirmed transactions."""
    config = _get_config(network=network)
    configure_logging(config.log_level)

    from pairbatch.services.pending_detector import PendingOperationDetector

    try:
        deployment = DeploymentRepository(config.deployments_dir).load(config.network)
        ledger, identity = _build_ledger(config, deployment)
    except SetupError as exc:
        _fail_setup(exc)
        return

    numbers = PendingOperationDetector(ledger).check(identity)
    if numbers is None:
        click.echo("[WARN] Could not read sequence numbers")
    elif numbers.has_pending:
        click.echo(f"[WARN] {numbers.pending_count} pending transaction(s) for {identity}")
        click.echo("  Consider waiting for them to confirm; buffered gas pricing will be used.")
    else:
        click.echo(f"[OK] No pending transactions for {identity} (nonce {numbers.confirmed})")


@click.command()
@click.option("--network", default=None, help="Network name (defaults to PAIRBATCH_NETWORK)")
def estimate_fees(network: str | None) -> None:
    """Show the gas settings each operation class would use right now."""
    config = _get_config(network=network)
    configure_logging(config.log_level)

    from pairbatch.services.fee_estimator import FeeEstimator

    try:
        deployment = DeploymentRepository(config.deployments_dir).load(config.network)
        ledger, _ = _build_ledger(config, deployment)
    except SetupError as exc:
        _fail_setup(exc)
        return

    estimator = FeeEstimator.from_config(ledger, config)
    for operation_class in OperationClass:
        try:
            settings = estimator.estimate(operation_class)
        except LedgerError as exc:
            _fail_setup(SetupError(f"Could not read fee snapshot: {exc}"))
            return
        click.echo(
            f"{operation_class.value:<10} gas price {format_gwei(settings.gas_price)} gwei, "
            f"gas limit {settings.gas_limit}"
        )


@click.command()
@click.option("--network", default=None, help="Network name (defaults to PAIRBATCH_NETWORK)")
def list_items(network: str | None) -> None:
    """List configured work items for a network."""
    config = _get_config(network=network)

    try:
        items = WorkItemRepository(config.work_items_path).load(config.network)
    except SetupError as exc:
        _fail_setup(exc)
        return

    if not items:
        click.echo(f"No work items configured for network: {config.network}")
        return

    click.echo(f"Work items for {config.network} ({len(items)}):")
    for item in items:
        click.echo(
            f"  {item.symbol:<12} {item.company_name:<40} "
            f"{format_amount(item.quote_liquidity):>10} NGN / "
            f"{format_amount(item.asset_liquidity):>8}  fee {item.fee_percent}%"
        )


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def show_result(path: str) -> None:
    """Render a saved batch result file."""
    from pairbatch.services.result_reporter import ResultReporter

    result = ResultReporter.load(path)
    click.echo(ResultReporter.render(result, path))
