"""Azure CLI helpers: session checks and ``deployment what-if``."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import structlog

from libraries.azure.whatif import WhatIfResult, parse_whatif
from libraries.commands.runner import (
    CommandFailedError,
    CommandResult,
    format_value,
    run_command,
)

log = structlog.get_logger(__name__)

NOT_LOGGED_IN_PATTERN = re.compile(r"Please run 'az login'", re.IGNORECASE)


class NotAuthenticatedError(RuntimeError):
    """Raised when the Azure CLI has no authenticated session."""


@dataclass(frozen=True)
class AzAccountInfo:
    subscription_name: str | None = None
    subscription_id: str | None = None
    tenant_id: str | None = None


def render_parameters(parameters: Mapping[str, Any] | None) -> list[str]:
    """Return ``--parameters name=value`` arguments for *parameters*."""

    args: list[str] = []
    for name, value in (parameters or {}).items():
        args.extend(["--parameters", f"{name}={format_value(value)}"])
    return args


class AzureCli:
    """Invoke ``az`` subcommands through :func:`run_command`."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _run(self, *args: str) -> CommandResult:
        return run_command([self.path, *args])

    def account_info(self) -> AzAccountInfo:
        """Return the default account or raise :class:`NotAuthenticatedError`."""

        result = self._run("account", "show", "--output", "json")
        if NOT_LOGGED_IN_PATTERN.search(result.stdout) or NOT_LOGGED_IN_PATTERN.search(
            result.stderr
        ):
            raise NotAuthenticatedError("Az CLI is not authenticated.")
        if not result.success:
            raise NotAuthenticatedError(
                f"Unable to read the Azure CLI account: {result.stderr.strip()}"
            )
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise NotAuthenticatedError(
                "Azure CLI returned an unreadable account document"
            ) from exc
        return AzAccountInfo(
            subscription_name=payload.get("name"),
            subscription_id=payload.get("id"),
            tenant_id=payload.get("tenantId"),
        )

    def set_subscription(self, subscription: str) -> None:
        result = self._run("account", "set", "--subscription", subscription)
        if not result.success:
            raise CommandFailedError(result, "az account set failed")

    def ensure_authenticated(self, subscription: str | None = None) -> AzAccountInfo:
        """Check for a session and optionally switch the default subscription."""

        account = self.account_info()
        log.info(
            "azure.account",
            subscription=account.subscription_name,
            tenant=account.tenant_id,
        )
        if subscription and subscription not in (
            account.subscription_name,
            account.subscription_id,
        ):
            log.info("azure.subscription.switch", subscription=subscription)
            self.set_subscription(subscription)
            account = self.account_info()
        return account

    def what_if(
        self,
        template: Path,
        *,
        location: str | None = None,
        resource_group: str | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> WhatIfResult:
        """Run a subscription or resource-group scoped what-if for *template*."""

        if resource_group:
            args = ["deployment", "group", "what-if", "--resource-group", resource_group]
        else:
            if not location:
                msg = "a location is required for subscription scoped what-if"
                raise ValueError(msg)
            args = ["deployment", "sub", "what-if", "--location", location]
        args += [
            "--template-file",
            str(template),
            "--no-pretty-print",
            "--output",
            "json",
            *render_parameters(parameters),
        ]
        result = self._run(*args)
        if not result.success:
            raise CommandFailedError(result, "az deployment what-if failed")
        whatif = parse_whatif(result.stdout)
        log.info(
            "azure.whatif.complete",
            template=str(template),
            changes=len(whatif.changes),
        )
        return whatif


__all__ = [
    "AzAccountInfo",
    "AzureCli",
    "NotAuthenticatedError",
    "render_parameters",
]
