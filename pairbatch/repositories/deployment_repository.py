"""Lookup of DEX system deployment records on disk."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from pairbatch.core.errors import SetupError
from pairbatch.models.deployment import Deployment
from pairbatch.utils.logger import get_logger

logger = get_logger(__name__)


class DeploymentRepository:
    """Reads ``ngn-dex-system-{network}-*.json`` files from a deployments directory."""

    def __init__(self, deployments_dir: str | Path) -> None:
        self.deployments_dir = Path(deployments_dir)

    def find_file(self, network: str) -> Path:
        """Return the deployment file for ``network``.

        When several match, the lexically last one (highest chain id or
        newest suffix) wins.
        """
        if not self.deployments_dir.is_dir():
            msg = f"Deployments directory not found: {self.deployments_dir}"
            raise SetupError(msg)

        candidates = sorted(self.deployments_dir.glob(f"ngn-dex-system-{network}-*.json"))
        if not candidates:
            msg = f"Deployment file not found for network: {network}"
            raise SetupError(msg)
        return candidates[-1]

    def load(self, network: str) -> Deployment:
        """Load and validate the deployment record for ``network``."""
        path = self.find_file(network)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            deployment = Deployment.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            msg = f"Invalid deployment file {path}: {exc}"
            raise SetupError(msg) from exc

        logger.info(
            "deployment_loaded",
            path=str(path),
            network=deployment.network,
            chain_id=deployment.chain_id,
            dex=deployment.contracts.stock_ngn_dex,
        )
        return deployment
