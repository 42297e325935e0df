"""Shared pytest fixtures for the plan-parity test-suite."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

VERSION_LINE: dict[str, Any] = {
    "@level": "info",
    "@message": "Terraform 1.6.5",
    "@module": "terraform.ui",
    "@timestamp": "2024-02-23T13:49:28.479064-06:00",
    "terraform": "1.6.5",
    "type": "version",
    "ui": "1.2",
}

APPLY_START_LINE: dict[str, Any] = {
    "@level": "info",
    "@message": "data.azurerm_client_config.current: Refreshing...",
    "@module": "terraform.ui",
    "@timestamp": "2024-02-23T13:50:03.507371-06:00",
    "hook": {
        "resource": {
            "addr": "data.azurerm_client_config.current",
            "module": "",
            "resource": "data.azurerm_client_config.current",
            "implied_provider": "azurerm",
            "resource_type": "azurerm_client_config",
            "resource_name": "current",
            "resource_key": None,
        },
        "action": "read",
    },
    "type": "apply_start",
}

APPLY_COMPLETE_LINE: dict[str, Any] = {
    "@level": "info",
    "@message": "data.azurerm_client_config.current: Refresh complete after 0s",
    "@module": "terraform.ui",
    "@timestamp": "2024-02-23T13:50:03.508973-06:00",
    "hook": {
        "resource": {
            "addr": "data.azurerm_client_config.current",
            "module": "",
            "resource": "data.azurerm_client_config.current",
            "implied_provider": "azurerm",
            "resource_type": "azurerm_client_config",
            "resource_name": "current",
            "resource_key": None,
        },
        "action": "read",
        "id_key": "id",
        "id_value": "Y2xpZW50Q29uZmlncy9jbGllbnRJZD0w",
        "elapsed_seconds": 0,
    },
    "type": "apply_complete",
}


def planned_change_line(
    resource_type: str, resource_name: str = "example", action: str = "create"
) -> dict[str, Any]:
    addr = f"{resource_type}.{resource_name}"
    return {
        "@level": "info",
        "@message": f"{addr}: Plan to {action}",
        "@module": "terraform.ui",
        "@timestamp": "2024-02-23T13:50:04.650549-06:00",
        "change": {
            "resource": {
                "addr": addr,
                "module": "",
                "resource": addr,
                "implied_provider": resource_type.split("_", 1)[0],
                "resource_type": resource_type,
                "resource_name": resource_name,
                "resource_key": None,
            },
            "action": action,
        },
        "type": "planned_change",
    }


CHANGE_SUMMARY_LINE: dict[str, Any] = {
    "@level": "info",
    "@message": "Plan: 5 to add, 0 to change, 0 to destroy.",
    "@module": "terraform.ui",
    "@timestamp": "2024-02-23T13:50:04.652705-06:00",
    "changes": {
        "add": 5,
        "change": 0,
        "import": 0,
        "remove": 0,
        "operation": "plan",
    },
    "type": "change_summary",
}

OUTPUTS_LINE: dict[str, Any] = {
    "@level": "info",
    "@message": "Outputs: 2",
    "@module": "terraform.ui",
    "@timestamp": "2024-02-23T13:50:04.652705-06:00",
    "outputs": {
        "AZURE_KEY_VAULT_NAME": {"sensitive": False, "action": "create"},
        "AZURE_OPENAI_KEY": {"sensitive": True, "action": "create"},
    },
    "type": "outputs",
}


def arm_change(
    resource_type: str, name: str, *, change_type: str = "Create"
) -> dict[str, Any]:
    resource_id = f"/subscriptions/13ae0661/resourceGroups/rg-nevermore/{name}"
    after = None
    if change_type != "Delete":
        after = {
            "apiVersion": "2021-04-01",
            "id": resource_id,
            "location": "eastus",
            "name": name,
            "tags": {"azd-env-name": "nevermore"},
            "type": resource_type,
        }
    return {
        "after": after,
        "before": None,
        "changeType": change_type,
        "delta": None,
        "resourceId": resource_id,
        "unsupportedReason": None,
    }


def to_stream(*records: dict[str, Any]) -> str:
    return "\n".join(json.dumps(record) for record in records) + "\n"


class RecordingLogger:
    """Collects structlog style calls so tests can assert on events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str) -> Any:
        def _log(event: str, **kwargs: Any) -> None:
            self.events.append((level, event, kwargs))

        return _log

    def __getattr__(self, level: str) -> Any:
        return self._record(level)

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


@pytest.fixture
def plan_stream_text() -> str:
    return to_stream(
        VERSION_LINE,
        APPLY_START_LINE,
        APPLY_COMPLETE_LINE,
        planned_change_line("azurerm_resource_group", "rg"),
        planned_change_line("azurerm_kubernetes_cluster", "aks"),
        planned_change_line("random_integer", "example"),
        CHANGE_SUMMARY_LINE,
        OUTPUTS_LINE,
    )


@pytest.fixture
def whatif_document() -> dict[str, Any]:
    return {
        "changes": [
            arm_change("Microsoft.Resources/resourceGroups", "rg-nevermore"),
            arm_change("Microsoft.ContainerService/managedClusters", "aks-nevermore"),
            arm_change("Microsoft.KeyVault/vaults", "kv-nevermore"),
        ]
    }


@pytest.fixture
def plan_file(tmp_path: Path, plan_stream_text: str) -> Path:
    path = tmp_path / "plan.jsonl"
    path.write_text(plan_stream_text, encoding="utf-8")
    return path


@pytest.fixture
def whatif_file(tmp_path: Path, whatif_document: dict[str, Any]) -> Path:
    path = tmp_path / "whatif.json"
    path.write_text(json.dumps(whatif_document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
