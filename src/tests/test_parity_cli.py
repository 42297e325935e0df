"""CLI behaviour and exit code mapping for ``plan-parity``."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from apps.parity import __main__ as cli_main
from apps.parity import compare as compare_module
from apps.parity.app import app
from apps.parity.utils.errors import (
    ExitCode,
    ParityConfigError,
    ParityExternalServiceError,
    ParityIOError,
    ParityRuntimeError,
    ParityValidationError,
    to_parity_error,
)
from conftest import VERSION_LINE, arm_change, planned_change_line, to_stream
from libraries.azure.cli import NotAuthenticatedError
from libraries.azure.whatif import WhatIfParseError
from libraries.commands import runner as runner_module
from libraries.commands.config import ToolSettings
from libraries.commands.runner import CommandFailedError, CommandResult, ToolNotFoundError
from libraries.reconcile.expectations import ExpectationConfigError
from libraries.terraform.stream import PlanStreamError

runner = CliRunner()

EXPECTED_YAML = """
expected:
  - type: azurerm_resource_group
    name: rg-nevermore
  - type: azurerm_kubernetes_cluster
parameters:
  location: eastus
"""


@pytest.fixture
def expected_file(tmp_path: Path) -> Path:
    path = tmp_path / "expected.yaml"
    path.write_text(EXPECTED_YAML, encoding="utf-8")
    return path


@pytest.fixture
def matching_plan_file(tmp_path: Path) -> Path:
    path = tmp_path / "matching.jsonl"
    path.write_text(
        to_stream(
            VERSION_LINE,
            planned_change_line("azurerm_resource_group", "rg"),
            planned_change_line("azurerm_kubernetes_cluster", "aks"),
            planned_change_line("azurerm_key_vault", "kv"),
        ),
        encoding="utf-8",
    )
    return path


def _compare_args(expected: Path, whatif: Path, plan: Path, *extra: str) -> list[str]:
    return [
        "compare",
        "--expected",
        str(expected),
        "--whatif-file",
        str(whatif),
        "--plan-file",
        str(plan),
        *extra,
    ]


def test_compare_reports_full_coverage(
    expected_file: Path, whatif_file: Path, matching_plan_file: Path
) -> None:
    result = runner.invoke(app, _compare_args(expected_file, whatif_file, matching_plan_file))

    assert result.exit_code == 0, result.output
    assert "Both tools plan the same resources" in result.output
    assert "[unexpected] azurerm_key_vault (kv): bicep + terraform" in result.output


def test_compare_flags_discrepancies_and_writes_reports(
    tmp_path: Path, expected_file: Path, whatif_file: Path, plan_file: Path
) -> None:
    json_path = tmp_path / "reports" / "parity.json"
    csv_path = tmp_path / "reports" / "parity.csv"

    result = runner.invoke(
        app,
        _compare_args(
            expected_file,
            whatif_file,
            plan_file,
            "--json",
            str(json_path),
            "--csv",
            str(csv_path),
        ),
    )

    assert result.exit_code == ExitCode.VALIDATION
    assert "Discrepancies detected: 0 missing, 2 one-sided." in result.output
    assert "random_integer (example): terraform only" in result.output

    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert [item["type"] for item in payload["expectedResults"]] == [
        "azurerm_resource_group",
        "azurerm_kubernetes_cluster",
    ]
    assert payload["actualResults"][-1] == {
        "type": "azurerm_key_vault",
        "name": "kv-nevermore",
        "provider": {"bicep": True, "terraform": False},
        "isExpected": False,
    }

    with csv_path.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.DictReader(fh))
    assert [row["type"] for row in rows] == [
        "azurerm_resource_group",
        "azurerm_kubernetes_cluster",
        "random_integer",
        "azurerm_key_vault",
    ]
    assert rows[2]["terraform"] == "True"
    assert rows[2]["is_expected"] == "False"


def test_compare_skips_without_expectations(
    tmp_path: Path, whatif_file: Path, plan_file: Path
) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("expected: []\n", encoding="utf-8")

    result = runner.invoke(app, _compare_args(empty, whatif_file, plan_file))

    assert result.exit_code == 0, result.output
    assert "No expected resources configured; comparison skipped." in result.output


def test_main_maps_missing_expectation_file_to_io(
    tmp_path: Path, whatif_file: Path, plan_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli_main.main(_compare_args(tmp_path / "absent.yaml", whatif_file, plan_file))

    assert exit_code == ExitCode.IO
    assert "I/O error: Expectation file not found" in capsys.readouterr().err


def test_main_maps_invalid_expectations_to_config(
    tmp_path: Path, whatif_file: Path, plan_file: Path
) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("expected: azurerm_key_vault\n", encoding="utf-8")

    assert cli_main.main(_compare_args(broken, whatif_file, plan_file)) == ExitCode.CONFIG


def test_main_maps_malformed_plan_to_validation(
    tmp_path: Path, expected_file: Path, whatif_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    bad_plan = tmp_path / "bad.jsonl"
    bad_plan.write_text(to_stream(VERSION_LINE) + "not json\n", encoding="utf-8")

    exit_code = cli_main.main(_compare_args(expected_file, whatif_file, bad_plan))

    assert exit_code == ExitCode.VALIDATION
    assert "line 2" in capsys.readouterr().err


def test_main_requires_a_plan_source(expected_file: Path, whatif_file: Path) -> None:
    exit_code = cli_main.main(
        ["compare", "--expected", str(expected_file), "--whatif-file", str(whatif_file)]
    )

    assert exit_code == ExitCode.VALIDATION


def test_main_returns_gap_exit_code(
    expected_file: Path, whatif_file: Path, plan_file: Path
) -> None:
    assert cli_main.main(_compare_args(expected_file, whatif_file, plan_file)) == 1


def test_main_maps_missing_terraform_to_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, expected_file: Path, whatif_file: Path
) -> None:
    settings = ToolSettings(az_path=None, terraform_path=None)
    monkeypatch.setattr(compare_module, "load_tool_settings", lambda: settings)
    monkeypatch.setattr(runner_module.shutil, "which", lambda name: None)

    exit_code = cli_main.main(
        [
            "compare",
            "--expected",
            str(expected_file),
            "--whatif-file",
            str(whatif_file),
            "--terraform-dir",
            str(tmp_path),
        ]
    )

    assert exit_code == ExitCode.CONFIG


class UnauthenticatedAzureCli:
    instances: list["UnauthenticatedAzureCli"] = []

    def __init__(self, path: Path) -> None:
        self.path = path
        self.subscriptions: list[Any] = []
        self.what_if_calls = 0
        UnauthenticatedAzureCli.instances.append(self)

    def ensure_authenticated(self, subscription: str | None = None) -> None:
        self.subscriptions.append(subscription)
        raise NotAuthenticatedError("Az CLI is not authenticated.")

    def what_if(self, *args: Any, **kwargs: Any) -> None:
        self.what_if_calls += 1


def test_main_maps_missing_login_to_external(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    expected_file: Path,
    plan_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    UnauthenticatedAzureCli.instances.clear()
    monkeypatch.setattr(compare_module, "AzureCli", UnauthenticatedAzureCli)
    monkeypatch.setenv("PARITY_AZ_PATH", "/opt/az/bin/az")
    template = tmp_path / "main.bicep"
    template.write_text("targetScope = 'subscription'\n", encoding="utf-8")

    exit_code = cli_main.main(
        [
            "compare",
            "--expected",
            str(expected_file),
            "--template",
            str(template),
            "--location",
            "eastus",
            "--subscription",
            "Dev",
            "--plan-file",
            str(plan_file),
        ]
    )

    assert exit_code == ExitCode.EXTERNAL
    assert "External service error: Az CLI is not authenticated." in capsys.readouterr().err
    cli = UnauthenticatedAzureCli.instances[0]
    assert cli.path == Path("/opt/az/bin/az")
    assert cli.subscriptions == ["Dev"]
    assert cli.what_if_calls == 0


def test_live_what_if_needs_location(
    tmp_path: Path, expected_file: Path, plan_file: Path
) -> None:
    exit_code = cli_main.main(
        [
            "compare",
            "--expected",
            str(expected_file),
            "--template",
            str(tmp_path / "main.bicep"),
            "--plan-file",
            str(plan_file),
        ]
    )

    assert exit_code == ExitCode.VALIDATION


def test_classify_text_output(plan_file: Path) -> None:
    result = runner.invoke(app, ["classify", str(plan_file)])

    assert result.exit_code == 0, result.output
    assert "Terraform version: 1.6.5" in result.output
    assert "  planned_change: 3" in result.output
    assert "  create: azurerm_kubernetes_cluster.aks" in result.output
    assert "Plan: 5 to add, 0 to change, 0 to destroy." in result.output


def test_classify_json_output(plan_file: Path) -> None:
    result = runner.invoke(app, ["classify", str(plan_file), "--format", "json"])

    assert result.exit_code == 0, result.output
    summary = json.loads(result.output)
    assert summary["terraform_version"] == "1.6.5"
    assert summary["records"]["planned_change"] == 3
    assert summary["planned_changes"][2] == {
        "address": "random_integer.example",
        "resource_type": "random_integer",
        "action": "create",
    }
    assert summary["change_summary"]["import"] == 0


def test_classify_missing_file_maps_to_io(tmp_path: Path) -> None:
    assert cli_main.main(["classify", str(tmp_path / "absent.jsonl")]) == ExitCode.IO


def test_classify_reports_empty_plan(tmp_path: Path) -> None:
    empty = tmp_path / "empty.jsonl"
    empty.write_text("", encoding="utf-8")

    result = runner.invoke(app, ["classify", str(empty)])

    assert result.exit_code == 0
    assert "Terraform version: unknown" in result.output
    assert "  <none>" in result.output


def test_arm_change_fixture_is_consumable(tmp_path: Path) -> None:
    whatif = tmp_path / "whatif.json"
    whatif.write_text(
        json.dumps({"changes": [arm_change("Microsoft.Network/virtualNetworks", "vnet")]}),
        encoding="utf-8",
    )
    expected = tmp_path / "expected.yaml"
    expected.write_text("- type: azurerm_virtual_network\n", encoding="utf-8")
    plan = tmp_path / "plan.jsonl"
    plan.write_text(
        to_stream(planned_change_line("azurerm_virtual_network", "vnet")), encoding="utf-8"
    )

    assert cli_main.main(_compare_args(expected, whatif, plan)) == ExitCode.SUCCESS


def test_verbose_logs_stay_off_stdout(
    plan_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli_main.main(["--verbose", "classify", str(plan_file), "--format", "json"])

    captured = capsys.readouterr()
    assert exit_code == ExitCode.SUCCESS
    assert json.loads(captured.out)["records"]["version"] == 1
    assert "plan_stream.classified" in captured.err


def test_main_maps_unwritable_report_to_io(
    tmp_path: Path,
    expected_file: Path,
    whatif_file: Path,
    matching_plan_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    blocker = tmp_path / "reports"
    blocker.write_text("not a directory", encoding="utf-8")

    exit_code = cli_main.main(
        _compare_args(
            expected_file,
            whatif_file,
            matching_plan_file,
            "--json",
            str(blocker / "parity.json"),
        )
    )

    assert exit_code == ExitCode.IO
    assert "I/O error: Unable to write JSON report" in capsys.readouterr().err


class BrokenWhatIfAzureCli:
    def __init__(self, path: Path) -> None:
        self.path = path

    def what_if(self, *args: Any, **kwargs: Any) -> None:
        raise ValueError("a location is required for subscription scoped what-if")


def test_main_maps_unexpected_tool_errors_to_runtime(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    expected_file: Path,
    plan_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(compare_module, "AzureCli", BrokenWhatIfAzureCli)
    monkeypatch.setenv("PARITY_AZ_PATH", "/opt/az/bin/az")

    exit_code = cli_main.main(
        [
            "compare",
            "--expected",
            str(expected_file),
            "--template",
            str(tmp_path / "main.bicep"),
            "--location",
            "eastus",
            "--skip-auth",
            "--plan-file",
            str(plan_file),
        ]
    )

    assert exit_code == ExitCode.RUNTIME
    assert "Runtime error: a location is required" in capsys.readouterr().err


def test_main_reports_usage_errors(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_main.main(["compare"])

    assert exit_code == ExitCode.VALIDATION
    assert "--expected" in capsys.readouterr().err


def test_subscription_without_live_what_if_is_reported(
    expected_file: Path, whatif_file: Path, matching_plan_file: Path
) -> None:
    result = runner.invoke(
        app,
        _compare_args(
            expected_file, whatif_file, matching_plan_file, "--subscription", "Dev"
        ),
    )

    assert result.exit_code == 0, result.output
    assert "Ignoring --subscription Dev: not used with --whatif-file." in result.output


def test_classify_undecodable_plan_maps_to_runtime(tmp_path: Path) -> None:
    plan = tmp_path / "plan.jsonl"
    plan.write_bytes(b'{"type": "version", "terraform": "\xff\xfe"}\n')

    assert cli_main.main(["classify", str(plan)]) == ExitCode.RUNTIME


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (NotAuthenticatedError("no session"), ParityExternalServiceError),
        (
            CommandFailedError(CommandResult(("az",), 1, "", "boom")),
            ParityExternalServiceError,
        ),
        (ToolNotFoundError("terraform"), ParityConfigError),
        (ExpectationConfigError("bad"), ParityConfigError),
        (PlanStreamError("bad", line_number=3), ParityValidationError),
        (WhatIfParseError("bad"), ParityValidationError),
        (PermissionError("denied"), ParityIOError),
        (ValueError("odd"), ParityRuntimeError),
    ],
)
def test_library_errors_map_to_exit_codes(
    error: Exception, expected: type[Exception]
) -> None:
    converted = to_parity_error(error)

    assert type(converted) is expected
    assert converted is not None and converted.message == str(error)


def test_unrelated_errors_are_not_mapped() -> None:
    assert to_parity_error(KeyError("missing")) is None
