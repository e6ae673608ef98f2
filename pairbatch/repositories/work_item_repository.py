"""Loading of per-network work item tables."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pairbatch.core.errors import SetupError
from pairbatch.models.work_item import WorkItem
from pairbatch.utils.logger import get_logger

logger = get_logger(__name__)

_ITEMS_ADAPTER = TypeAdapter(list[WorkItem])


class WorkItemRepository:
    """Reads ``{"<network>": [work item, ...]}`` tables from a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, list[dict]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            msg = f"Work item file not found: {self.path}"
            raise SetupError(msg) from exc
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Unreadable work item file {self.path}: {exc}"
            raise SetupError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Work item file {self.path} must map network names to lists"
            raise SetupError(msg)
        return data

    def networks(self) -> list[str]:
        return sorted(self._read())

    def load(self, network: str) -> list[WorkItem]:
        """Return the ordered work items for ``network`` (empty when none)."""
        raw_items = self._read().get(network, [])
        try:
            items = _ITEMS_ADAPTER.validate_python(raw_items)
        except ValidationError as exc:
            msg = f"Invalid work items for {network} in {self.path}: {exc}"
            raise SetupError(msg) from exc

        symbols = [item.symbol for item in items]
        duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
        if duplicates:
            msg = f"Duplicate work item symbols for {network}: {', '.join(duplicates)}"
            raise SetupError(msg)

        logger.info("work_items_loaded", network=network, count=len(items), path=str(self.path))
        return items
