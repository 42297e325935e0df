"""Map each tool's resource vocabulary onto a shared comparison key."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from libraries.azure.whatif import AzureResource, WhatIfResult
from libraries.terraform.models import PlanDocument, PlannedChangeRecord

ARM_TYPE_MAP: Mapping[str, str] = {
    "Microsoft.Resources/resourceGroups": "azurerm_resource_group",
    "Microsoft.ContainerService/managedClusters": "azurerm_kubernetes_cluster",
    "Microsoft.Network/virtualNetworks": "azurerm_virtual_network",
    "Microsoft.Network/publicIPAddresses": "azurerm_public_ip",
    "Microsoft.Network/networkInterfaces": "azurerm_network_interface",
    "Microsoft.Network/networkSecurityGroups": "azurerm_network_security_group",
    "Microsoft.KeyVault/vaults": "azurerm_key_vault",
    "Microsoft.Authorization/roleAssignments": "azurerm_role_assignment",
}


@dataclass(frozen=True)
class ResourceIdentity:
    """Comparison key for a resource.

    Only :attr:`type` takes part in equality; :attr:`name` rides along for
    reporting.
    """

    type: str
    name: str | None = field(default=None, compare=False)

    @classmethod
    def coerce(cls, value: "ResourceIdentity | str") -> "ResourceIdentity":
        if isinstance(value, ResourceIdentity):
            return value
        return cls(type=value)


def normalize_arm_type(resource_type: str) -> str:
    """Return the comparison key for an ARM resource type.

    Types missing from :data:`ARM_TYPE_MAP` are returned verbatim.
    """

    return ARM_TYPE_MAP.get(resource_type, resource_type)


def identity_from_arm(resource: AzureResource) -> ResourceIdentity:
    return ResourceIdentity(
        type=normalize_arm_type(resource.type or ""),
        name=resource.name or None,
    )


def identity_from_planned_change(record: PlannedChangeRecord) -> ResourceIdentity:
    resource = record.change.resource
    return ResourceIdentity(
        type=resource.resource_type or "",
        name=resource.resource_name or None,
    )


def bicep_identities(whatif: WhatIfResult) -> list[ResourceIdentity]:
    """One identity per what-if change with an ``after`` state, in order."""

    return [identity_from_arm(resource) for resource in whatif.after_resources()]


def terraform_identities(
    document: PlanDocument | Iterable[PlannedChangeRecord],
) -> list[ResourceIdentity]:
    """One identity per ``planned_change`` record, in order."""

    records = (
        document.planned_change if isinstance(document, PlanDocument) else document
    )
    return [identity_from_planned_change(record) for record in records]


__all__ = [
    "ARM_TYPE_MAP",
    "ResourceIdentity",
    "bicep_identities",
    "identity_from_arm",
    "identity_from_planned_change",
    "normalize_arm_type",
    "terraform_identities",
]
